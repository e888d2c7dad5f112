"""
Document Intake - Upload Validation.

Validates file count and MIME type for an upload batch and turns the
accepted files into Document metadata. File bytes are never read.
"""

import random
from typing import Sequence

from pydantic import Field

from src.analysis.schemas import Document, RecordModel
from src.utils.ids import Clock, RandomSource, new_token, utc_now
from src.utils.logger import get_logger

logger = get_logger(__name__)

MAX_FILES = 3

SUPPORTED_MIME_TYPES: frozenset[str] = frozenset({
    "application/pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/msword",
    "text/plain",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
})


class IntakeError(Exception):
    """Raised when an upload batch is rejected. The message is user-facing."""
    pass


class UploadedFile(RecordModel):
    """What the upload surface knows about a file before intake."""

    name: str = Field(..., min_length=1)
    size: int = Field(default=0, ge=0)
    type: str = Field(..., description="MIME type reported by the client")


class DocumentIntake:
    """
    Accept or reject upload batches.

    A batch is all-or-nothing: one bad file rejects the whole batch, so
    no partial batch ever reaches analysis.
    """

    def __init__(
        self,
        max_files: int = MAX_FILES,
        supported_types: frozenset[str] = SUPPORTED_MIME_TYPES,
        rng: RandomSource | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.max_files = max_files
        self.supported_types = supported_types
        self.rng = rng or random.Random()
        self.clock = clock or utc_now

    def accept(
        self,
        files: Sequence[UploadedFile],
        existing_count: int = 0,
    ) -> list[Document]:
        """
        Validate a batch and build Documents for it.

        Args:
            files: Newly uploaded files
            existing_count: Files already staged for the same analysis

        Returns:
            One Document per file, in upload order

        Raises:
            IntakeError: Too many files or unsupported MIME types
        """
        self._check(files, existing_count)

        documents = [
            Document(
                id=new_token(rng=self.rng, clock=self.clock),
                name=f.name,
                size=f.size,
                type=f.type,
                uploaded_at=self.clock(),
            )
            for f in files
        ]
        logger.info(f"Accepted {len(documents)} document(s): {[d.name for d in documents]}")
        return documents

    def validate(
        self,
        documents: Sequence[Document],
        existing_count: int = 0,
    ) -> None:
        """
        Apply the intake rules to Documents that did not come through `accept`.

        Raises:
            IntakeError: Too many documents or unsupported MIME types
        """
        self._check(documents, existing_count)

    def _check(
        self,
        items: Sequence[UploadedFile] | Sequence[Document],
        existing_count: int,
    ) -> None:
        if existing_count + len(items) > self.max_files:
            raise IntakeError(
                f"Maximum {self.max_files} files allowed. Please remove some files first."
            )

        unsupported = [item.name for item in items if item.type not in self.supported_types]
        if unsupported:
            raise IntakeError(
                f"Unsupported file types: {', '.join(unsupported)}. "
                "Please upload PDF, DOCX, TXT, or PPT files."
            )


def require_documents(documents: Sequence[Document]) -> None:
    """Reject an empty analysis request."""
    if not documents:
        raise IntakeError("Please upload at least one document to analyze.")
