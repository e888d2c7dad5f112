"""
Accounts - Identity provider contract and user data export.
"""

from src.accounts.export import (
    EXPORT_FILENAME,
    AnalysisPreferences,
    ExportSnapshot,
    IdentityProvider,
    NotificationPreferences,
    StaticIdentityProvider,
    User,
    UserPreferences,
    build_export,
)

__all__ = [
    "User",
    "IdentityProvider",
    "StaticIdentityProvider",
    "UserPreferences",
    "NotificationPreferences",
    "AnalysisPreferences",
    "ExportSnapshot",
    "EXPORT_FILENAME",
    "build_export",
]
