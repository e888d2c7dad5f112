"""
Tests for Document Intake.
"""

import pytest

from src.intake import (
    SUPPORTED_MIME_TYPES,
    DocumentIntake,
    IntakeError,
    UploadedFile,
    require_documents,
)
from tests.conftest import FIXED_NOW

PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


@pytest.fixture
def intake(stub_rng, clock) -> DocumentIntake:
    return DocumentIntake(rng=stub_rng(), clock=clock)


class TestDocumentIntake:
    """Tests for batch validation."""

    def test_accepts_supported_files(self, intake) -> None:
        documents = intake.accept([
            UploadedFile(name="leave_policy.pdf", size=2048, type=PDF),
            UploadedFile(name="hr_handbook.docx", size=4096, type=DOCX),
        ])

        assert [d.name for d in documents] == ["leave_policy.pdf", "hr_handbook.docx"]
        assert [d.size for d in documents] == [2048, 4096]
        assert documents[1].type == DOCX
        assert all(d.uploaded_at == FIXED_NOW for d in documents)
        assert documents[0].id != documents[1].id

    def test_all_supported_types(self, intake) -> None:
        files = [UploadedFile(name=f"f{i}", type=t) for i, t in enumerate(sorted(SUPPORTED_MIME_TYPES))]

        accepted = DocumentIntake(max_files=len(files)).accept(files)

        assert len(accepted) == 6

    def test_too_many_files(self, intake) -> None:
        files = [UploadedFile(name=f"doc{i}.pdf", type=PDF) for i in range(4)]

        with pytest.raises(IntakeError, match="Maximum 3 files allowed"):
            intake.accept(files)

    def test_existing_files_count_toward_limit(self, intake) -> None:
        files = [UploadedFile(name=f"doc{i}.pdf", type=PDF) for i in range(2)]

        with pytest.raises(IntakeError, match="Please remove some files first"):
            intake.accept(files, existing_count=2)

        assert len(intake.accept(files, existing_count=1)) == 2

    def test_unsupported_rejects_whole_batch(self, intake) -> None:
        files = [
            UploadedFile(name="policy.pdf", type=PDF),
            UploadedFile(name="photo.png", type="image/png"),
            UploadedFile(name="data.csv", type="text/csv"),
        ]

        with pytest.raises(IntakeError) as exc_info:
            intake.accept(files)

        message = str(exc_info.value)
        assert "photo.png, data.csv" in message
        assert "policy.pdf" not in message
        assert "Please upload PDF, DOCX, TXT, or PPT files." in message

    def test_custom_limit(self, stub_rng, clock) -> None:
        intake = DocumentIntake(max_files=1, rng=stub_rng(), clock=clock)

        with pytest.raises(IntakeError, match="Maximum 1 files allowed"):
            intake.accept([UploadedFile(name="a.pdf", type=PDF), UploadedFile(name="b.pdf", type=PDF)])


class TestValidateDocuments:
    """Tests for checking Documents built outside `accept`."""

    def test_supported_batch_passes(self, intake, sample_documents) -> None:
        intake.validate(sample_documents)

    def test_unsupported_types(self, intake, make_document) -> None:
        documents = [
            make_document("virus.exe", type="application/x-msdownload"),
            make_document("photo.png", type="image/png"),
        ]

        with pytest.raises(IntakeError) as exc_info:
            intake.validate(documents)

        assert "Unsupported file types: virus.exe, photo.png" in str(exc_info.value)

    def test_too_many_documents(self, intake, make_document) -> None:
        documents = [make_document(f"doc{i}.pdf") for i in range(4)]

        with pytest.raises(IntakeError, match="Maximum 3 files allowed"):
            intake.validate(documents)


class TestRequireDocuments:
    """Tests for the empty-batch guard."""

    def test_empty_batch(self) -> None:
        with pytest.raises(IntakeError, match="at least one document"):
            require_documents([])

    def test_non_empty_batch(self, sample_documents) -> None:
        require_documents(sample_documents)
