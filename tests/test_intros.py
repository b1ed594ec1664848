"""Tests for intro selection and the intro service."""

from __future__ import annotations

import asyncio
import random

import pytest

from app.config import Settings
from app.models import ReconcileReport
from app.services.intro_cache import IntroCacheReconciler
from app.services.intros import IntroSelector, IntroService
from app.utils import item_id_for


class StubReconciler(IntroCacheReconciler):
    """Reconciler double returning a canned report."""

    def __init__(self, report: ReconcileReport) -> None:  # pragma: no cover - nothing to initialise
        # Skip super().__init__ so no channel, library or downloader is needed.
        self.report = report
        self.calls = 0

    @property
    def is_running(self) -> bool:
        return False

    async def reconcile(self) -> ReconcileReport:  # type: ignore[override]
        self.calls += 1
        return self.report


def test_select_intros_with_zero_count_is_empty() -> None:
    assert IntroSelector().select_intros(["a", "b"], 0) == []


def test_select_intros_from_empty_cache_is_empty() -> None:
    assert IntroSelector().select_intros([], 3) == []


def test_select_intros_returns_distinct_hashed_ids() -> None:
    cache_ids = ["10", "11", "12", "13"]

    intros = IntroSelector(random.Random(7)).select_intros(cache_ids, 3)

    ids = [intro.item_id for intro in intros]
    assert len(ids) == 3
    assert len(set(ids)) == 3
    assert set(ids) <= {item_id_for(cache_id) for cache_id in cache_ids}


def test_select_intros_caps_at_available_trailers() -> None:
    intros = IntroSelector().select_intros(["10", "11"], 5)

    assert sorted(intro.item_id for intro in intros) == sorted(
        [item_id_for("10"), item_id_for("11")]
    )


def test_select_intros_does_not_reorder_input() -> None:
    cache_ids = ["10", "11", "12"]

    IntroSelector(random.Random(1)).select_intros(cache_ids, 2)

    assert cache_ids == ["10", "11", "12"]


def test_service_has_no_intros_before_first_refresh() -> None:
    service = IntroService(Settings(_env_file=None), StubReconciler(ReconcileReport()))

    assert service.last_report is None
    assert service.get_intros() == []


@pytest.mark.anyio("asyncio")
async def test_service_serves_intros_from_latest_report() -> None:
    report = ReconcileReport(cached_ids=["10", "11", "12"])
    reconciler = StubReconciler(report)
    service = IntroService(Settings(_env_file=None, INTRO_COUNT=2), reconciler)

    assert await service.refresh() is report

    assert service.last_report is report
    assert len(service.get_intros()) == 2
    assert len(service.get_intros(3)) == 3
    assert service.get_intros(0) == []
    assert not service.is_refreshing


@pytest.mark.anyio("asyncio")
async def test_service_start_runs_refresh_and_stop_cancels() -> None:
    reconciler = StubReconciler(ReconcileReport(cached_ids=["10"]))
    service = IntroService(Settings(_env_file=None), reconciler)

    await service.start()
    for _ in range(10):
        if reconciler.calls:
            break
        await asyncio.sleep(0)
    await service.stop()

    assert reconciler.calls == 1
    assert service.last_report is not None
    assert [intro.item_id for intro in service.get_intros()] == [item_id_for("10")]
