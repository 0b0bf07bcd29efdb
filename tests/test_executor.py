"""Tests for batch execution accounting."""

from __future__ import annotations

import subprocess

import pytest

from helpers import make_items
from reclaim.core.errors import ExecutionFailure, PreconditionFailure
from reclaim.core.executor import execute_batch


def _failing_remover(failures: set[str], exc_type=OSError):
    removed: list[str] = []

    def remover(item):
        if item.identifier in failures:
            raise exc_type(f"cannot remove {item.identifier}")
        removed.append(item.identifier)

    return remover, removed


class TestExecuteBatch:
    def test_all_succeed(self):
        items = make_items(("a", 10), ("b", 20))
        remover, removed = _failing_remover(set())
        result = execute_batch(items, remover)
        assert removed == ["a", "b"]
        assert (result.attempted, result.succeeded, result.failed) == (2, 2, 0)
        assert result.bytes_reclaimed == 30

    @pytest.mark.parametrize("failures", [set(), {"b"}, {"a", "d"}, {"a", "b", "c", "d"}])
    def test_counts_and_bytes(self, failures):
        items = make_items(("a", 1), ("b", 20), ("c", 300), ("d", 4000))
        remover, _ = _failing_remover(failures)
        result = execute_batch(items, remover)
        assert result.attempted == 4
        assert result.failed == len(failures)
        assert result.succeeded == 4 - len(failures)
        assert result.bytes_reclaimed == sum(i.size_bytes for i in items if i.identifier not in failures)

    @pytest.mark.parametrize("exc_type", [OSError, ExecutionFailure, subprocess.CalledProcessError])
    def test_continues_after_failure(self, exc_type):
        items = make_items(("a", 1), ("b", 2))

        def remover(item):
            if item.identifier == "a":
                if exc_type is subprocess.CalledProcessError:
                    raise subprocess.CalledProcessError(1, ["rm"])
                raise exc_type("boom")

        result = execute_batch(items, remover)
        assert [o.success for o in result.outcomes] == [False, True]
        assert result.outcomes[0].error
        assert result.bytes_reclaimed == 2

    def test_callback_sees_every_outcome(self):
        items = make_items(("a", 1), ("b", 2))
        remover, _ = _failing_remover({"a"})
        seen = []
        execute_batch(items, remover, on_outcome=lambda item, outcome: seen.append((item.identifier, outcome.success)))
        assert seen == [("a", False), ("b", True)]

    @pytest.mark.parametrize(
        "error",
        [PreconditionFailure("sudo is not installed"), ValueError("a.bin has no path to remove"), KeyError("a.bin")],
    )
    def test_any_item_error_is_recorded_and_the_batch_continues(self, error):
        items = make_items(("a.bin", 100), ("b.bin", 200))
        removed = []

        def remover(item):
            if item.identifier == "a.bin":
                raise error
            removed.append(item.identifier)

        result = execute_batch(items, remover)
        assert removed == ["b.bin"]
        assert (result.attempted, result.succeeded, result.failed) == (2, 1, 1)
        assert result.bytes_reclaimed == 200
        assert result.outcomes[0].error
