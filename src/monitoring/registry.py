"""
Monitor Registry - External URL Watch Configurations.

CRUD over ExternalMonitor records plus the forced-check contract. Polling
itself is external; the registry only consumes a "content changed" signal.
"""

import random
from typing import Sequence

from pydantic import BaseModel

from src.analysis.schemas import (
    Document,
    ExternalMonitor,
    MonitorFrequency,
    MonitorStatus,
)
from src.storage.repositories import MonitorRepository
from src.utils.ids import Clock, RandomSource, new_token, utc_now
from src.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CHANGE_PROBABILITY = 0.3


class MonitorCheck(BaseModel):
    """Outcome of one forced check."""

    monitor: ExternalMonitor
    changed: bool


class MonitorRegistry:
    """
    Manage external monitors.

    When a check reports a change, the caller should trigger a new
    analysis run for the monitor's documents
    (`AnalysisService.trigger_from_monitor`).

    Usage:
        registry = MonitorRegistry(MonitorRepository(store))
        monitor = registry.add("https://example.edu/policy")
        check = registry.force_check(monitor.id)
    """

    def __init__(
        self,
        repository: MonitorRepository,
        rng: RandomSource | None = None,
        clock: Clock | None = None,
        change_probability: float = DEFAULT_CHANGE_PROBABILITY,
    ) -> None:
        """
        Initialize the registry.

        Args:
            repository: Monitor persistence
            rng: Source for the simulated "change detected" draw
            clock: Clock for check timestamps
            change_probability: Chance a forced check without an explicit
                signal reports a change
        """
        self.repository = repository
        self.rng = rng or random.Random()
        self.clock = clock or utc_now
        self.change_probability = change_probability

    def add(
        self,
        url: str,
        frequency: MonitorFrequency = MonitorFrequency.DAILY,
        documents: Sequence[Document] = (),
    ) -> ExternalMonitor:
        """Create and store an active monitor."""
        monitor = ExternalMonitor(
            id=new_token(rng=self.rng, clock=self.clock),
            url=url,
            frequency=frequency,
            status=MonitorStatus.ACTIVE,
            last_checked=self.clock(),
            documents=list(documents),
        )
        self.repository.save(monitor)
        logger.info(f"Monitoring {url} ({frequency.value})")
        return monitor

    def list_all(self) -> list[ExternalMonitor]:
        return self.repository.list_all()

    def get(self, monitor_id: str) -> ExternalMonitor | None:
        return self.repository.get_by_id(monitor_id)

    def update(self, monitor_id: str, monitor: ExternalMonitor) -> bool:
        return self.repository.update(monitor_id, monitor)

    def delete(self, monitor_id: str) -> bool:
        deleted = self.repository.delete(monitor_id)
        if deleted:
            logger.info(f"Deleted monitor {monitor_id}")
        return deleted

    def toggle(self, monitor_id: str) -> ExternalMonitor | None:
        """Flip active/inactive. Scheduling is not affected here."""
        monitor = self.repository.get_by_id(monitor_id)
        if monitor is None:
            return None

        status = MonitorStatus.INACTIVE if monitor.is_active else MonitorStatus.ACTIVE
        updated = monitor.model_copy(update={"status": status})
        self.repository.update(monitor_id, updated)
        return updated

    def force_check(self, monitor_id: str, changed: bool | None = None) -> MonitorCheck | None:
        """
        Record a check of the monitored URL.

        `last_checked` is always set to now. `last_update` moves to now only
        when a change is detected.

        Args:
            monitor_id: Monitor to check
            changed: Change signal from the poller; drawn at random if None

        Returns:
            The check outcome, or None if the monitor is unknown
        """
        monitor = self.repository.get_by_id(monitor_id)
        if monitor is None:
            return None

        if changed is None:
            changed = self.rng.random() > 1 - self.change_probability

        now = self.clock()
        update: dict = {"last_checked": now}
        if changed:
            update["last_update"] = now

        updated = monitor.model_copy(update=update)
        self.repository.update(monitor_id, updated)

        if changed:
            logger.info(f"Change detected at {monitor.url}")
        return MonitorCheck(monitor=updated, changed=changed)
