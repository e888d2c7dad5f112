"""
Intake - Upload validation producing Document metadata.
"""

from src.intake.validator import (
    MAX_FILES,
    SUPPORTED_MIME_TYPES,
    DocumentIntake,
    IntakeError,
    UploadedFile,
    require_documents,
)

__all__ = [
    "DocumentIntake",
    "IntakeError",
    "UploadedFile",
    "require_documents",
    "MAX_FILES",
    "SUPPORTED_MIME_TYPES",
]
