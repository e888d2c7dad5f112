"""
Pytest Configuration and Fixtures.

All fixtures use REAL components - no mocks.
Stores are in-memory unless a test needs a file on disk, and every
random source and clock is injected so results are reproducible.
"""

import random
from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from src.analysis.schemas import (
    Conflict,
    ConflictSeverity,
    ConflictSource,
    ConflictSources,
    ConflictStatus,
    ConflictType,
    Document,
    Report,
)
from src.storage import MonitorRepository, RecordStore, ReportRepository, UsageRepository

FIXED_NOW = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


# ============================================================================
# Deterministic Sources
# ============================================================================


class StubRandom:
    """
    Scripted stand-in for `random.Random`.

    `random()` and `uniform()` return fixed values, `choice()` picks a fixed
    index, and `randint()` cycles through its range so ids stay distinct.
    """

    def __init__(
        self,
        random_value: float = 0.9,
        uniform_value: float = 10.0,
        choice_index: int = 0,
    ) -> None:
        self.random_value = random_value
        self.uniform_value = uniform_value
        self.choice_index = choice_index
        self._counter = 0

    def random(self) -> float:
        return self.random_value

    def uniform(self, a: float, b: float) -> float:
        return self.uniform_value

    def choice(self, seq):  # type: ignore[no-untyped-def]
        return seq[self.choice_index % len(seq)]

    def randint(self, a: int, b: int) -> int:
        value = a + self._counter % (b - a + 1)
        self._counter += 1
        return value


class SteppingClock:
    """Clock that advances by `step` on every call."""

    def __init__(self, start: datetime = FIXED_NOW, step: timedelta = timedelta(seconds=1)) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current = now + self.step
        return now


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def stub_rng() -> type[StubRandom]:
    """Factory for scripted random sources."""
    return StubRandom


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """Clock frozen at FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def stepping_clock() -> SteppingClock:
    return SteppingClock()


# ============================================================================
# Store Fixtures (Real, not mocked)
# ============================================================================


@pytest.fixture
def store() -> RecordStore:
    """In-memory record store."""
    return RecordStore()


@pytest.fixture
def usage_repo(store) -> UsageRepository:
    return UsageRepository(store)


@pytest.fixture
def report_repo(store, usage_repo) -> ReportRepository:
    return ReportRepository(store, usage_repo)


@pytest.fixture
def monitor_repo(store) -> MonitorRepository:
    return MonitorRepository(store)


# ============================================================================
# Document & Report Fixtures
# ============================================================================


@pytest.fixture
def make_document() -> Callable[..., Document]:
    """Factory for Document metadata."""
    counter = {"n": 0}

    def _make(name: str, type: str = "application/pdf", size: int = 1024) -> Document:
        counter["n"] += 1
        return Document(
            id=f"doc_{counter['n']}",
            name=name,
            size=size,
            type=type,
            uploaded_at=FIXED_NOW,
        )

    return _make


@pytest.fixture
def sample_documents(make_document) -> list[Document]:
    """Three documents that trigger the policy and HR rules."""
    return [
        make_document("leave_policy.pdf"),
        make_document("hr_policy.docx", type="application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
        make_document("notes.txt", type="text/plain"),
    ]


@pytest.fixture
def make_conflict() -> Callable[..., Conflict]:
    """Factory for conflicts with a chosen severity and status."""
    counter = {"n": 0}

    def _make(
        severity: ConflictSeverity = ConflictSeverity.MEDIUM,
        status: ConflictStatus = ConflictStatus.OPEN,
        doc1: str = "a.pdf",
        doc2: str = "b.pdf",
    ) -> Conflict:
        counter["n"] += 1
        return Conflict(
            id=f"conflict_{counter['n']}",
            conflict_type=ConflictType.INCONSISTENCY,
            severity=severity,
            title="Timeline Discrepancy",
            description=f"Inconsistent requirements found between {doc1} and {doc2}",
            documents=ConflictSources(
                source1=ConflictSource(name=doc1, page=1, line=2, text="5 business days"),
                source2=ConflictSource(name=doc2, page=3, line=4, text="7-10 business days"),
            ),
            suggestion="Clarify processing timelines.",
            status=status,
        )

    return _make


@pytest.fixture
def make_report(make_document) -> Callable[..., Report]:
    """Factory for reports built from conflicts."""
    counter = {"n": 0}

    def _make(
        conflicts: list[Conflict] | None = None,
        names: tuple[str, ...] = ("a.pdf", "b.pdf"),
        created_at: datetime = FIXED_NOW,
    ) -> Report:
        counter["n"] += 1
        return Report.from_conflicts(
            f"report_{counter['n']}",
            [make_document(name) for name in names],
            conflicts or [],
            created_at=created_at,
        )

    return _make
