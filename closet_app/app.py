"""Smart Closet app bootstrap."""

from __future__ import annotations

import logging
import random
from concurrent.futures import Future
from datetime import datetime
from typing import Callable, Optional, TypeVar

from closet_app.config import ClosetConfig
from closet_app.logging_config import configure_logging, get_logger, log_event
from logic.recommendation import RecommendationEngine
from logic.statistics import WardrobeSummary
from tools.closet_tools import ClosetService
from tools.diary_tools import DiaryService
from tools.planner_tools import PlannerService
from tools.reminder_scheduler import InMemoryReminderScheduler, ReminderScheduler
from tools.store_executor import Dispatcher, StoreExecutor
from tools.wardrobe_store import SQLiteWardrobeStore, WardrobeStore

LOGGER = get_logger(__name__)
T = TypeVar("T")


class SmartClosetApp:
    """Wires together the store, engines and services.

    Every collaborator can be passed in; anything omitted is built from
    ``config``.
    """

    def __init__(
        self,
        config: ClosetConfig | None = None,
        store: WardrobeStore | None = None,
        scheduler: ReminderScheduler | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
        dispatch: Optional[Dispatcher] = None,
    ) -> None:
        self.config = config or ClosetConfig.from_env()
        configure_logging(self.config.log_level)

        self.store = store or SQLiteWardrobeStore(self.config.database_path)
        self.scheduler = scheduler or InMemoryReminderScheduler()
        self.executor = StoreExecutor(readers=self.config.reader_threads, dispatch=dispatch)
        if rng is None:
            rng = random.Random(self.config.random_seed)
        self.recommendations = RecommendationEngine(self.store, rng=rng, clock=clock)
        self.closet = ClosetService(
            self.store,
            unworn_days=self.config.unworn_days,
            top_items_limit=self.config.top_items_limit,
            color_history_limit=self.config.color_history_limit,
            recent_outfits_limit=self.config.recent_outfits_limit,
        )
        self.diary = DiaryService(self.store)
        self.planner = PlannerService(
            self.store,
            scheduler=self.scheduler,
            reminder_minutes=self.config.event_reminder_minutes,
        )
        log_event(
            LOGGER,
            logging.INFO,
            "closet_app_started",
            database_path=str(self.config.database_path),
            environment=self.config.environment or "local",
        )

    def wardrobe_summary(self, now: datetime | None = None) -> WardrobeSummary:
        """Refresh the closet snapshot and summarise it."""

        self.closet.refresh()
        return self.closet.statistics(now=now)

    def run_read(self, fn: Callable[..., T], *args, **kwargs) -> "Future[T]":
        """Run a read-only call on the reader pool."""

        return self.executor.submit_read(fn, *args, **kwargs)

    def run_write(self, fn: Callable[..., T], *args, **kwargs) -> "Future[T]":
        """Run a mutating call on the single writer thread."""

        return self.executor.submit_write(fn, *args, **kwargs)

    def close(self) -> None:
        self.executor.shutdown()

    def __enter__(self) -> "SmartClosetApp":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
