"""Tests for the kernel retention policy."""

from __future__ import annotations

import itertools
import random

import pytest

from reclaim.core.errors import RetentionViolation
from reclaim.core.retention import NOTHING_TO_REMOVE, classify, verify_removal
from reclaim.models.kernel import KernelEntry, KernelVersion


def _entry(version: str, error: str = "") -> KernelEntry:
    return KernelEntry(
        version=KernelVersion.parse(version),
        package=f"linux-image-{version}",
        related=(f"linux-modules-{version}", f"linux-headers-{version}"),
        size_bytes=100,
        error=error,
    )


def _versions(entries) -> list[str]:
    return [str(e.version) for e in entries]


class TestKernelVersion:
    def test_numeric_ordering(self):
        assert KernelVersion.parse("5.15.0") > KernelVersion.parse("5.9.0")
        assert KernelVersion.parse("6.8.0-45-generic") > KernelVersion.parse("6.8.0-9-generic")

    def test_missing_components_default_to_zero(self):
        assert KernelVersion.parse("6.8").key[:3] == (6, 8, 0)

    def test_numeric_suffix_sorts_before_text(self):
        assert KernelVersion.parse("6.1.0-1") < KernelVersion.parse("6.1.0-rc1")

    def test_textual_suffix_is_lexical(self):
        assert KernelVersion.parse("6.1.0-18-amd64") < KernelVersion.parse("6.1.0-18-cloud")

    def test_rejects_garbage(self):
        with pytest.raises(ValueError):
            KernelVersion.parse("generic")


class TestClassify:
    def test_keeps_running_and_newest_previous(self):
        entries = [_entry(v) for v in ("5.15.0", "5.14.0", "5.13.0", "5.12.0")]
        plan = classify(entries, "5.15.0")
        assert _versions(plan.candidates) == ["5.12.0", "5.13.0"]
        assert _versions(plan.kept) == ["5.15.0", "5.14.0"]
        assert plan.running is not None and plan.running.is_running

    def test_running_not_newest(self):
        entries = [_entry(v) for v in ("6.8.0-50-generic", "6.8.0-45-generic", "6.8.0-40-generic", "6.8.0-31-generic")]
        plan = classify(entries, "6.8.0-45-generic")
        assert _versions(plan.kept) == ["6.8.0-45-generic", "6.8.0-50-generic"]
        assert _versions(plan.candidates) == ["6.8.0-31-generic", "6.8.0-40-generic"]

    def test_single_previous_is_nothing_to_remove(self):
        plan = classify([_entry("5.15.0"), _entry("5.14.0")], "5.15.0")
        assert plan.candidates == []
        assert plan.reason == NOTHING_TO_REMOVE
        assert _versions(plan.kept) == ["5.15.0", "5.14.0"]

    def test_only_running(self):
        plan = classify([_entry("5.15.0")], "5.15.0")
        assert plan.candidates == []
        assert plan.reason == NOTHING_TO_REMOVE

    def test_unknown_running_fails_closed(self):
        entries = [_entry(v) for v in ("5.15.0", "5.14.0", "5.13.0")]
        for running in (None, ""):
            plan = classify(entries, running)
            assert plan.candidates == []
            assert "could not be determined" in plan.reason

    def test_running_not_installed_fails_closed(self):
        entries = [_entry(v) for v in ("5.14.0", "5.13.0", "5.12.0")]
        plan = classify(entries, "5.15.0")
        assert plan.candidates == []
        assert plan.running is None

    def test_metadata_errors_are_excluded(self):
        entries = [_entry("5.15.0"), _entry("5.14.0"), _entry("5.13.0", error="size unknown"), _entry("5.12.0")]
        plan = classify(entries, "5.15.0")
        assert _versions(plan.excluded) == ["5.13.0"]
        assert _versions(plan.candidates) == ["5.12.0"]

    def test_keep_previous_is_configurable(self):
        entries = [_entry(v) for v in ("5.15.0", "5.14.0", "5.13.0", "5.12.0")]
        plan = classify(entries, "5.15.0", keep_previous=2)
        assert _versions(plan.candidates) == ["5.12.0"]

    def test_keep_previous_never_below_one(self):
        entries = [_entry(v) for v in ("5.15.0", "5.14.0", "5.13.0")]
        plan = classify(entries, "5.15.0", keep_previous=0)
        assert _versions(plan.candidates) == ["5.13.0"]

    def test_invariant_over_many_orderings(self):
        versions = ["4.19.0", "5.4.0", "5.10.0", "5.15.0", "6.1.0", "6.8.0"]
        rng = random.Random(1234)
        for size in range(1, len(versions) + 1):
            for chosen in itertools.combinations(versions, size):
                running = rng.choice(chosen)
                entries = [_entry(v) for v in rng.sample(list(chosen), len(chosen))]
                plan = classify(entries, running)
                candidates = _versions(plan.candidates)
                assert running not in candidates
                non_running = len(chosen) - 1
                if non_running >= 2:
                    assert any(not e.is_running for e in plan.kept)
                    assert len(candidates) == non_running - 1
                else:
                    assert candidates == []


class TestVerifyRemoval:
    def test_accepts_candidates(self):
        entries = [_entry(v) for v in ("5.15.0", "5.14.0", "5.13.0")]
        plan = classify(entries, "5.15.0")
        verify_removal(plan, plan.candidates[0].packages)

    def test_rejects_running_kernel_packages(self):
        entries = [_entry(v) for v in ("5.15.0", "5.14.0", "5.13.0")]
        plan = classify(entries, "5.15.0")
        with pytest.raises(RetentionViolation):
            verify_removal(plan, ["linux-image-5.15.0"])

    def test_rejects_fallback_kernel_packages(self):
        entries = [_entry(v) for v in ("5.15.0", "5.14.0", "5.13.0")]
        plan = classify(entries, "5.15.0")
        with pytest.raises(RetentionViolation):
            verify_removal(plan, ["linux-modules-5.14.0"])

    def test_rejects_plan_without_running_kernel(self):
        plan = classify([_entry("5.14.0")], None)
        with pytest.raises(RetentionViolation):
            verify_removal(plan, [])
