"""Webhook event types offered in the subscription picker, grouped for display."""

from dataclasses import dataclass


@dataclass(frozen=True)
class WebhookEventDefinition:
    value: str
    label: str


@dataclass(frozen=True)
class WebhookEventCategory:
    name: str
    events: tuple[WebhookEventDefinition, ...]


def _events(*pairs: tuple[str, str]) -> tuple[WebhookEventDefinition, ...]:
    return tuple(WebhookEventDefinition(value, label) for value, label in pairs)


WEBHOOK_EVENT_CATEGORIES: tuple[WebhookEventCategory, ...] = (
    WebhookEventCategory(
        "Records",
        _events(
            ("record.created", "Record created"),
            ("record.updated", "Record updated"),
            ("record.merged", "Record merged"),
            ("record.deleted", "Record deleted"),
        ),
    ),
    WebhookEventCategory(
        "Notes",
        _events(
            ("note.created", "Note created"),
            ("note.updated", "Note updated"),
            ("note-content.updated", "Note content updated"),
            ("note.deleted", "Note deleted"),
        ),
    ),
    WebhookEventCategory(
        "Tasks",
        _events(
            ("task.created", "Task created"),
            ("task.updated", "Task updated"),
            ("task.deleted", "Task deleted"),
        ),
    ),
    WebhookEventCategory(
        "Lists",
        _events(
            ("list.created", "List created"),
            ("list.updated", "List updated"),
            ("list.deleted", "List deleted"),
        ),
    ),
    WebhookEventCategory(
        "List Entries",
        _events(
            ("list-entry.created", "List entry created"),
            ("list-entry.updated", "List entry updated"),
            ("list-entry.deleted", "List entry deleted"),
        ),
    ),
    WebhookEventCategory(
        "List Attributes",
        _events(
            ("list-attribute.created", "List attribute created"),
            ("list-attribute.updated", "List attribute updated"),
        ),
    ),
    WebhookEventCategory(
        "Object Attributes",
        _events(
            ("object-attribute.created", "Object attribute created"),
            ("object-attribute.updated", "Object attribute updated"),
        ),
    ),
    WebhookEventCategory(
        "Comments",
        _events(
            ("comment.created", "Comment created"),
            ("comment.resolved", "Comment resolved"),
            ("comment.unresolved", "Comment unresolved"),
            ("comment.deleted", "Comment deleted"),
        ),
    ),
    WebhookEventCategory(
        "Other",
        _events(
            ("call-recording.created", "Call recording created"),
            ("workspace-member.created", "Workspace member created"),
        ),
    ),
)

ALL_WEBHOOK_EVENTS: tuple[WebhookEventDefinition, ...] = tuple(
    event for category in WEBHOOK_EVENT_CATEGORIES for event in category.events
)

_EVENT_LABELS = {event.value: event.label for event in ALL_WEBHOOK_EVENTS}


def is_valid_event_type(event_type: str) -> bool:
    return event_type in _EVENT_LABELS


def get_event_label(event_type: str) -> str:
    return _EVENT_LABELS.get(event_type, event_type)
