"""
Tests for the identity contract and data export.
"""

from src.accounts import (
    EXPORT_FILENAME,
    AnalysisPreferences,
    StaticIdentityProvider,
    User,
    UserPreferences,
    build_export,
)
from src.analysis.schemas import AnalysisSensitivity
from tests.conftest import FIXED_NOW


class TestIdentityProvider:
    """Tests for StaticIdentityProvider."""

    def test_anonymous(self) -> None:
        provider = StaticIdentityProvider()

        assert not provider.is_authenticated()
        assert provider.current_user() is None

    def test_signed_in(self) -> None:
        user = User(id="u1", email="reviewer@example.edu", name="Reviewer")
        provider = StaticIdentityProvider(user)

        assert provider.is_authenticated()
        assert provider.current_user() == user


class TestExport:
    """Tests for build_export."""

    def test_defaults(self, clock) -> None:
        user = User(id="u1", email="reviewer@example.edu", name="Reviewer", created_at=FIXED_NOW)

        snapshot = build_export(user, clock=clock)

        assert snapshot.export_date == FIXED_NOW
        assert snapshot.settings.notifications.email is True
        assert snapshot.settings.notifications.reports is False
        assert snapshot.settings.analysis.default_sensitivity == AnalysisSensitivity.MEDIUM

    def test_record_layout(self, clock) -> None:
        user = User(id="u1", email="reviewer@example.edu", name="Reviewer", created_at=FIXED_NOW)

        record = build_export(user, clock=clock).to_record()

        assert set(record) == {"user", "settings", "exportDate"}
        assert record["user"]["createdAt"].startswith("2026-03-02T09:30:00")
        assert record["settings"]["analysis"]["defaultSensitivity"] == "medium"
        assert record["settings"]["analysis"]["includeRecommendations"] is True

    def test_custom_preferences(self, clock) -> None:
        preferences = UserPreferences(
            analysis=AnalysisPreferences(default_sensitivity=AnalysisSensitivity.HIGH, auto_generate=False),
        )

        snapshot = build_export(None, preferences, clock=clock)

        assert snapshot.user is None
        assert snapshot.settings.analysis.default_sensitivity == AnalysisSensitivity.HIGH
        assert snapshot.settings.analysis.auto_generate is False

    def test_filename(self) -> None:
        assert EXPORT_FILENAME.endswith(".json")
