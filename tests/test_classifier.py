"""
Tests for the Conflict Classifier.

Category rules are deterministic; illustrative fields come from the
injected random source.
"""

import random

import pytest

from src.analysis.classifier import (
    ACADEMIC_TEMPLATE,
    GENERIC_TEMPLATES,
    HR_TEMPLATE,
    POLICY_TEMPLATE,
    ConflictClassifier,
    DocumentCategory,
    categorize,
    matches_category,
)
from src.analysis.schemas import (
    AnalysisSensitivity,
    ConflictSeverity,
    ConflictStatus,
    ConflictType,
)


# ============================================================================
# Category Matching
# ============================================================================


class TestCategories:
    """Tests for filename keyword matching."""

    def test_matches_keyword_anywhere_in_name(self) -> None:
        assert matches_category("Leave_Policy_2024.pdf", DocumentCategory.POLICY)
        assert matches_category("employee-handbook.docx", DocumentCategory.HR)
        assert matches_category("course_syllabus.txt", DocumentCategory.ACADEMIC)

    def test_matching_is_case_insensitive(self) -> None:
        assert matches_category("HR_GUIDE.PDF", DocumentCategory.HR)

    def test_no_match(self) -> None:
        assert not matches_category("notes.txt", DocumentCategory.POLICY)

    def test_categorize_priority(self) -> None:
        """Academic keywords include 'presentation' and win over PRESENTATION."""
        assert categorize("sih_presentation.pptx") == DocumentCategory.ACADEMIC
        assert categorize("vendor_contract.pdf") == DocumentCategory.CONTRACT
        assert categorize("notes.txt") == DocumentCategory.GENERAL


# ============================================================================
# Conflict Synthesis
# ============================================================================


class TestConflictClassifier:
    """Tests for ConflictClassifier.classify."""

    def test_both_policy_documents(self, make_document, stub_rng, clock) -> None:
        classifier = ConflictClassifier(rng=stub_rng(), clock=clock)
        doc1 = make_document("leave_policy.pdf")
        doc2 = make_document("travel_guideline.pdf")

        conflicts = classifier.classify(doc1, doc2)

        assert len(conflicts) == 1
        conflict = conflicts[0]
        assert conflict.title == POLICY_TEMPLATE.title
        assert conflict.conflict_type == ConflictType.CONTRADICTION
        assert conflict.severity == ConflictSeverity.HIGH
        assert conflict.status == ConflictStatus.OPEN
        assert "48-hour" in conflict.documents.source1.text
        assert "72-hour" in conflict.documents.source2.text

    def test_hr_documents(self, make_document, stub_rng, clock) -> None:
        classifier = ConflictClassifier(rng=stub_rng(), clock=clock)
        doc1 = make_document("leave-policy.pdf")
        doc2 = make_document("hr-handbook.docx", type="application/vnd.openxmlformats-officedocument.wordprocessingml.document")

        conflicts = classifier.classify(doc1, doc2)

        hr_conflicts = [c for c in conflicts if c.title == HR_TEMPLATE.title]
        assert len(hr_conflicts) == 1
        conflict = hr_conflicts[0]
        assert conflict.title == "Employment Policy Contradiction"
        assert conflict.conflict_type == ConflictType.CONTRADICTION
        assert conflict.severity == ConflictSeverity.HIGH
        assert "14 days" in conflict.documents.source1.text
        assert "21-day" in conflict.documents.source2.text
        assert conflict.documents.source1.name == "leave-policy.pdf"
        assert conflict.documents.source2.name == "hr-handbook.docx"

    def test_one_policy_document_is_not_enough(self, make_document, stub_rng, clock) -> None:
        classifier = ConflictClassifier(rng=stub_rng(), clock=clock)

        conflicts = classifier.classify(
            make_document("leave_policy.pdf"),
            make_document("notes.txt"),
        )

        assert [c.title for c in conflicts] != [POLICY_TEMPLATE.title]
        assert len(conflicts) == 1

    def test_several_rules_fire_in_priority_order(self, make_document, stub_rng, clock) -> None:
        classifier = ConflictClassifier(rng=stub_rng(), clock=clock)

        conflicts = classifier.classify(
            make_document("leave_policy.pdf"),
            make_document("hr_policy.pdf"),
        )

        assert [c.title for c in conflicts] == [POLICY_TEMPLATE.title, HR_TEMPLATE.title]
        assert conflicts[0].id != conflicts[1].id

    def test_academic_rule(self, make_document, stub_rng, clock) -> None:
        classifier = ConflictClassifier(rng=stub_rng(), clock=clock)

        conflicts = classifier.classify(
            make_document("notes.txt"),
            make_document("course_syllabus.docx"),
        )

        assert len(conflicts) == 1
        assert conflicts[0].title == ACADEMIC_TEMPLATE.title
        assert conflicts[0].conflict_type == ConflictType.INCONSISTENCY
        assert conflicts[0].severity == ConflictSeverity.MEDIUM

    def test_generic_fallback_uses_random_template(self, make_document, stub_rng, clock) -> None:
        classifier = ConflictClassifier(rng=stub_rng(choice_index=1), clock=clock)

        conflicts = classifier.classify(make_document("alpha.txt"), make_document("beta.txt"))

        assert len(conflicts) == 1
        assert conflicts[0].title == GENERIC_TEMPLATES[1].title
        assert conflicts[0].conflict_type == ConflictType.INCONSISTENCY

    @pytest.mark.parametrize(
        "draw, expected",
        [(0.9, ConflictSeverity.MEDIUM), (0.2, ConflictSeverity.LOW), (0.5, ConflictSeverity.LOW)],
    )
    def test_generic_severity_draw(self, make_document, stub_rng, clock, draw, expected) -> None:
        classifier = ConflictClassifier(rng=stub_rng(random_value=draw), clock=clock)

        conflicts = classifier.classify(make_document("alpha.txt"), make_document("beta.txt"))

        assert conflicts[0].severity == expected

    def test_evidence_names_and_locations(self, make_document, clock) -> None:
        classifier = ConflictClassifier(rng=random.Random(5), clock=clock)
        doc1 = make_document("hr_handbook.pdf")
        doc2 = make_document("notes.txt")

        conflict = classifier.classify(doc1, doc2)[0]

        assert conflict.documents.source1.name == doc1.name
        assert conflict.documents.source2.name == doc2.name
        for source in (conflict.documents.source1, conflict.documents.source2):
            assert 1 <= source.page <= HR_TEMPLATE.max_page
            assert 1 <= source.line <= HR_TEMPLATE.max_line

    def test_text_mentions_real_document_names(self, make_document, stub_rng, clock) -> None:
        classifier = ConflictClassifier(rng=stub_rng(), clock=clock)

        conflict = classifier.classify(
            make_document("leave_policy.pdf"),
            make_document("travel_policy.pdf"),
        )[0]

        assert "leave_policy.pdf" in conflict.description
        assert "travel_policy.pdf" in conflict.description
        assert "leave_policy.pdf" in conflict.suggestion

    def test_conflict_ids_are_prefixed(self, make_document, stub_rng, clock) -> None:
        classifier = ConflictClassifier(rng=stub_rng(), clock=clock)

        conflict = classifier.classify(make_document("a.txt"), make_document("b.txt"))[0]

        assert conflict.id.startswith("conflict_")

    def test_same_seed_same_conflicts(self, make_document, clock) -> None:
        doc1 = make_document("alpha.txt")
        doc2 = make_document("beta.txt")

        first = ConflictClassifier(rng=random.Random(7), clock=clock).classify(doc1, doc2)
        second = ConflictClassifier(rng=random.Random(7), clock=clock).classify(doc1, doc2)

        assert [c.to_record() for c in first] == [c.to_record() for c in second]


class TestSensitivity:
    """Tests for the sensitivity severity floor."""

    def test_low_sensitivity_raises_fallback_severity(self, make_document, stub_rng, clock) -> None:
        classifier = ConflictClassifier(rng=stub_rng(random_value=0.1), clock=clock)

        conflicts = classifier.classify(
            make_document("alpha.txt"),
            make_document("beta.txt"),
            AnalysisSensitivity.LOW,
        )

        assert len(conflicts) == 1
        assert conflicts[0].severity == ConflictSeverity.MEDIUM
        assert conflicts[0].title in {t.title for t in GENERIC_TEMPLATES}

    @pytest.mark.parametrize("sensitivity", [AnalysisSensitivity.MEDIUM, AnalysisSensitivity.HIGH])
    def test_other_levels_keep_everything(self, make_document, stub_rng, clock, sensitivity) -> None:
        classifier = ConflictClassifier(rng=stub_rng(random_value=0.1), clock=clock)

        conflicts = classifier.classify(
            make_document("alpha.txt"),
            make_document("beta.txt"),
            sensitivity,
        )

        assert len(conflicts) == 1
        assert conflicts[0].severity == ConflictSeverity.LOW

    def test_low_sensitivity_keeps_high_severity(self, make_document, stub_rng, clock) -> None:
        classifier = ConflictClassifier(rng=stub_rng(), clock=clock)

        conflicts = classifier.classify(
            make_document("leave_policy.pdf"),
            make_document("hr_policy.pdf"),
            AnalysisSensitivity.LOW,
        )

        assert len(conflicts) == 2
