"""Tests for the append-only action log."""

from __future__ import annotations

import re
from datetime import datetime

from reclaim.core.action_log import ActionLog


def _clock(*moments):
    it = iter(moments)
    return lambda: next(it)


class TestActionLog:
    def test_created_on_first_append(self, tmp_path):
        log = ActionLog(tmp_path / "nested" / "actions.log")
        assert not log.exists
        log.append("Session started")
        assert log.exists

    def test_line_format(self, tmp_path):
        log = ActionLog(tmp_path / "actions.log", clock=_clock(datetime(2024, 5, 1, 13, 4, 5, 123456)))
        log.append("APT cleanup started")
        assert log.path.read_text() == "[2024-05-01 13:04:05] APT cleanup started\n"

    def test_appends_never_rewrite(self, tmp_path):
        log = ActionLog(tmp_path / "actions.log")
        log.append("one")
        log.append("two")
        lines = log.path.read_text().splitlines()
        assert len(lines) == 2
        assert all(re.match(r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] ", line) for line in lines)

    def test_multiline_messages_stay_on_one_line(self, tmp_path):
        log = ActionLog(tmp_path / "actions.log")
        log.append("first\nsecond")
        assert len(log.path.read_text().splitlines()) == 1

    def test_records_round_trip(self, tmp_path):
        moments = (datetime(2024, 1, 1, 8, 0, 0), datetime(2024, 1, 1, 8, 0, 1))
        log = ActionLog(tmp_path / "actions.log", clock=_clock(*moments))
        log.append("a")
        log.append("b")
        records = log.records()
        assert [r.message for r in records] == ["a", "b"]
        assert records[1].timestamp == moments[1]

    def test_records_skip_foreign_lines(self, tmp_path):
        path = tmp_path / "actions.log"
        path.write_text("garbage\n[2024-01-01 00:00:00] ok\n[not a date] nope\n")
        assert [r.message for r in ActionLog(path).records()] == ["ok"]

    def test_clear(self, tmp_path):
        log = ActionLog(tmp_path / "actions.log")
        log.append("something")
        log.clear()
        assert log.read_text() == ""
        assert log.records() == []

    def test_missing_file(self, tmp_path):
        log = ActionLog(tmp_path / "none.log")
        assert log.records() == []
        assert log.read_text() == ""
        assert not log.exists
