"""Tests for the request log and action history."""

import json

import pytest

from attio_tui.models.navigation import AppState, PaneId
from attio_tui.services.request_log import RequestLog, RequestStatus
from attio_tui.state.app_state import FocusPane, SetResults
from attio_tui.utils.action_logger import ActionLogger, sanitize_payload, summarize_state_diff

from conftest import make_items


def _append(log, label="fetch notes", status=RequestStatus.SUCCESS, **kwargs):
    return log.append(label, status, "2024-01-15T10:30:00+00:00", 12, **kwargs)


class TestRequestLog:
    """Tests for the bounded request log."""

    def test_newest_first(self):
        log = RequestLog()
        _append(log, "first")
        _append(log, "second")
        assert [e.label for e in log.entries()] == ["second", "first"]

    def test_ids_increase(self):
        log = RequestLog()
        assert _append(log).id == "req-1"
        assert _append(log).id == "req-2"

    def test_capacity_drops_oldest(self):
        log = RequestLog(capacity=3)
        for i in range(5):
            _append(log, f"r{i}")
        assert len(log) == 3
        assert [e.label for e in log.entries()] == ["r4", "r3", "r2"]

    def test_recent_window(self):
        log = RequestLog()
        for i in range(30):
            _append(log, f"r{i}")
        recent = log.recent()
        assert len(recent) == 20
        assert recent[0].label == "r29"

    def test_negative_duration_clamped(self):
        log = RequestLog()
        entry = log.append("x", RequestStatus.SUCCESS, "2024-01-15T10:30:00+00:00", -5)
        assert entry.duration_ms == 0

    def test_to_dict_omits_empty_fields(self):
        entry = _append(RequestLog(), status=RequestStatus.ERROR, error_message="Network error: offline")
        data = entry.to_dict()
        assert data["status"] == "error"
        assert data["error_message"] == "Network error: offline"
        assert "detail" not in data

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            RequestLog(capacity=0)

    def test_clear(self):
        log = RequestLog()
        _append(log)
        log.clear()
        assert log.entries() == []


class TestActionLogger:
    """Tests for the dispatched event history."""

    def test_sanitize_payload(self):
        payload = sanitize_payload(SetResults(make_items(3), has_next_page=True, next_cursor="3"))
        assert payload["items"] == "[3 items]"
        assert payload["has_next_page"] is True
        assert payload["next_cursor"] == "3"

    def test_sanitize_enum_payload(self):
        assert sanitize_payload(FocusPane(PaneId.DETAIL)) == {"pane": "detail"}

    def test_sanitize_non_dataclass(self):
        assert sanitize_payload("event") == {}

    def test_summarize_diff(self):
        before = AppState()
        after = AppState(focused_pane=PaneId.RESULTS, debug_enabled=True)
        assert summarize_state_diff(before, after) == "debug: False→True, focusedPane: navigator→results"

    def test_capacity(self):
        logger = ActionLogger(capacity=2)
        state = AppState()
        for _ in range(3):
            logger.record(FocusPane(PaneId.RESULTS), state, state)
        assert len(logger.entries()) == 2

    def test_write_to_file(self, tmp_path):
        logger = ActionLogger()
        logger.record(FocusPane(PaneId.DETAIL), AppState(), AppState(focused_pane=PaneId.DETAIL))
        path = logger.write_to_file(tmp_path / "debug" / "actions.jsonl")
        line = json.loads(path.read_text().splitlines()[0])
        assert line["event_type"] == "FocusPane"
        assert line["state_summary"] == "focusedPane: navigator→detail"
