"""Intro selection and the scheduled intro cache refresh."""

from __future__ import annotations

import asyncio
import logging
import random
from contextlib import suppress
from typing import Sequence

from ..config import Settings
from ..models import IntroInfo, ReconcileReport
from ..utils import item_id_for
from .intro_cache import IntroCacheReconciler

logger = logging.getLogger(__name__)


class IntroSelector:
    """Picks a random subset of cached trailers to play as intros."""

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()

    def select_intros(self, cache_ids: Sequence[str], count: int) -> list[IntroInfo]:
        if count <= 0 or not cache_ids:
            return []
        shuffled = list(cache_ids)
        self._rng.shuffle(shuffled)
        return [IntroInfo(item_id=item_id_for(cache_id)) for cache_id in shuffled[:count]]


class IntroService:
    """Runs the reconciler on a schedule and serves intros from its result."""

    def __init__(
        self,
        settings: Settings,
        reconciler: IntroCacheReconciler,
        selector: IntroSelector | None = None,
    ):
        self._settings = settings
        self._reconciler = reconciler
        self._selector = selector or IntroSelector()
        self._report: ReconcileReport | None = None
        self._refresh_task: asyncio.Task[None] | None = None
        self._refresh_interval = settings.intro_refresh_interval_seconds

    @property
    def last_report(self) -> ReconcileReport | None:
        return self._report

    @property
    def is_refreshing(self) -> bool:
        return self._reconciler.is_running

    async def start(self) -> None:
        """Launch the background refresh loop."""

        if self._refresh_task is None:
            self._refresh_task = asyncio.create_task(self._refresh_loop())

    async def stop(self) -> None:
        """Stop the background refresh loop."""

        if self._refresh_task is None:
            return
        self._refresh_task.cancel()
        with suppress(asyncio.CancelledError):
            await self._refresh_task
        self._refresh_task = None

    async def refresh(self) -> ReconcileReport:
        """Reconcile the intro cache now and remember the outcome."""

        report = await self._reconciler.reconcile()
        self._report = report
        return report

    def get_intros(self, count: int | None = None) -> list[IntroInfo]:
        """Return up to ``count`` intros from the latest reconciliation."""

        resolved = self._settings.intro_count if count is None else count
        cache_ids = self._report.cached_ids if self._report else []
        return self._selector.select_intros(cache_ids, resolved)

    async def _refresh_loop(self) -> None:
        while True:
            try:
                await self.refresh()
            except Exception as exc:  # pragma: no cover - background safety net
                logger.exception("Scheduled intro refresh failed: %s", exc)
            await asyncio.sleep(self._refresh_interval)
