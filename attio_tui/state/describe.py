"""Plain-text projection of the UI state, used by debug exports and ``attio-tui describe``."""

from ..models.navigation import (
    AppState,
    CategoryType,
    ColumnPickerState,
    NavigatorCategory,
    PaneId,
    WebhookModalMode,
    WebhookModalState,
)


def _category_label(category: NavigatorCategory) -> str:
    if category.type is CategoryType.OBJECT:
        return category.object_slug or "object"
    if category.type is CategoryType.LIST:
        return "List"
    return category.type.value.capitalize()


def _describe_webhook_modal(modal: WebhookModalState) -> str:
    if modal.mode is WebhookModalMode.CLOSED:
        return "closed"
    if modal.mode is WebhookModalMode.CREATE:
        return (
            f'create (step={modal.step.value}, url="{modal.target_url}", '
            f"events={len(modal.selected_events)})"
        )
    if modal.mode is WebhookModalMode.EDIT:
        return (
            f'edit (id={modal.webhook_id}, step={modal.step.value}, url="{modal.target_url}", '
            f"events={len(modal.selected_events)})"
        )
    return f'delete (id={modal.webhook_id}, url="{modal.target_url}")'


def _describe_column_picker(picker: ColumnPickerState) -> str:
    if not picker.is_open:
        return "closed"
    return f'open (entity={picker.entity_key}, title="{picker.title}")'


def _bool(value: bool) -> str:
    return "true" if value else "false"


def describe_ui_state(state: AppState) -> str:
    navigator = state.navigator
    results = state.results
    detail = state.detail
    palette = state.command_palette

    category = navigator.selected_category
    category_label = _category_label(category) if category else "none"
    selected_title = results.selected_item.title if results.selected_item else "none"
    detail_title = detail.item.title if detail.item else "none"
    detail_type = detail.item.type.value if detail.item else "none"

    if palette.is_open:
        palette_line = f'open (query="{palette.query}", selectedIndex={palette.selected_index})'
    else:
        palette_line = "closed"

    lines = [
        "=== UI State ===",
        (
            f"Navigator: focused={_bool(state.focused_pane is PaneId.NAVIGATOR)}, "
            f"{len(navigator.categories)} categories, "
            f'selected="{category_label}" (index {navigator.selected_index}), '
            f"loading={_bool(navigator.loading)}"
        ),
        (
            f"Results: {len(results.items)} items, "
            f'selected="{selected_title}" (index {results.selected_index}), '
            f"loading={_bool(results.loading)}, hasNextPage={_bool(results.has_next_page)}, "
            f'searchQuery="{results.search_query}"'
        ),
        (
            f'Detail: tab={detail.active_tab.value}, item="{detail_title}" (type={detail_type}), '
            f"focused={_bool(state.focused_pane is PaneId.DETAIL)}"
        ),
        f"Command Palette: {palette_line}",
        f"Column Picker: {_describe_column_picker(state.column_picker)}",
        f"Webhook Modal: {_describe_webhook_modal(state.webhook_modal)}",
        f"Debug: enabled={_bool(state.debug_enabled)}",
    ]
    return "\n".join(lines)
