"""
Accounts - Identity contract and data export.

The identity provider is external: the pipeline only asks whether
someone is signed in and who it is. Export builds the downloadable
snapshot of a user's profile and preferences.
"""

from datetime import datetime
from typing import Protocol

from pydantic import Field

from src.analysis.schemas import AnalysisSensitivity, RecordModel
from src.utils.ids import Clock, utc_now


class User(RecordModel):
    id: str
    email: str
    name: str
    created_at: datetime = Field(default_factory=utc_now)


class IdentityProvider(Protocol):
    """Supplies the current user. Credentials are never seen here."""

    def is_authenticated(self) -> bool: ...

    def current_user(self) -> User | None: ...


class StaticIdentityProvider:
    """Identity provider backed by a fixed user (or nobody)."""

    def __init__(self, user: User | None = None) -> None:
        self.user = user

    def is_authenticated(self) -> bool:
        return self.user is not None

    def current_user(self) -> User | None:
        return self.user


class NotificationPreferences(RecordModel):
    email: bool = True
    conflicts: bool = True
    reports: bool = False
    monitoring: bool = True


class AnalysisPreferences(RecordModel):
    default_sensitivity: AnalysisSensitivity = AnalysisSensitivity.MEDIUM
    auto_generate: bool = True
    include_recommendations: bool = True


class UserPreferences(RecordModel):
    notifications: NotificationPreferences = Field(default_factory=NotificationPreferences)
    analysis: AnalysisPreferences = Field(default_factory=AnalysisPreferences)


class ExportSnapshot(RecordModel):
    """Full user data export."""

    user: User | None
    settings: UserPreferences
    export_date: datetime


EXPORT_FILENAME = "smart-doc-checker-data.json"


def build_export(
    user: User | None,
    preferences: UserPreferences | None = None,
    clock: Clock | None = None,
) -> ExportSnapshot:
    return ExportSnapshot(
        user=user,
        settings=preferences or UserPreferences(),
        export_date=(clock or utc_now)(),
    )
