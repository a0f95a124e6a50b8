"""Shared pytest fixtures for attio-tui tests."""

import pytest

from attio_tui.config.constants import CONFIG_DIR_ENV_VAR
from attio_tui.models.navigation import AppState, ResultItem, ResultType
from attio_tui.services.request_log import RequestLog
from attio_tui.state.store import AppStore


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path, monkeypatch):
    """Point the config directory at a temp dir so no test touches ~/.attio-tui."""
    config_dir = tmp_path / "config"
    monkeypatch.setenv(CONFIG_DIR_ENV_VAR, str(config_dir))
    return config_dir


def make_item(
    item_id: str = "rec-1",
    title: str = "Acme",
    result_type: ResultType = ResultType.OBJECT,
    subtitle: str | None = None,
    data: dict | None = None,
) -> ResultItem:
    return ResultItem(type=result_type, id=item_id, title=title, subtitle=subtitle, data=data or {"id": item_id})


def make_items(count: int, result_type: ResultType = ResultType.OBJECT, prefix: str = "rec") -> tuple[ResultItem, ...]:
    return tuple(make_item(f"{prefix}-{i}", f"Item {i}", result_type) for i in range(count))


@pytest.fixture
def request_log():
    return RequestLog()


@pytest.fixture
def store(request_log):
    return AppStore(AppState(), request_log=request_log)
