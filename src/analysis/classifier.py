"""
Conflict Classifier - Filename-Driven Conflict Synthesis.

Decides which conflict categories apply to a pair of documents by
matching their filenames against curated keyword sets, then synthesizes
conflicts from fixed templates with located evidence excerpts.
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from src.analysis.schemas import (
    SEVERITY_RANK,
    AnalysisSensitivity,
    Conflict,
    ConflictSeverity,
    ConflictSource,
    ConflictSources,
    ConflictStatus,
    ConflictType,
    Document,
)
from src.utils.ids import Clock, RandomSource, new_token, utc_now
from src.utils.logger import get_logger

logger = get_logger(__name__)


# ============================================================================
# Document Categories
# ============================================================================


class DocumentCategory(str, Enum):
    """Coarse document category inferred from the filename."""

    POLICY = "policy"
    HR = "hr"
    ACADEMIC = "academic"
    CONTRACT = "contract"
    PRESENTATION = "presentation"
    GENERAL = "general"


CATEGORY_KEYWORDS: dict[DocumentCategory, tuple[str, ...]] = {
    DocumentCategory.POLICY: ("policy", "rule", "guideline", "regulation"),
    DocumentCategory.HR: ("hr", "employee", "staff", "personnel", "handbook"),
    DocumentCategory.ACADEMIC: (
        "academic",
        "student",
        "course",
        "syllabus",
        "curriculum",
        "sih",
        "presentation",
        "project",
    ),
    DocumentCategory.CONTRACT: ("contract", "agreement"),
    DocumentCategory.PRESENTATION: ("presentation", "ppt"),
}


def matches_category(filename: str, category: DocumentCategory) -> bool:
    """True if any keyword of `category` occurs in the filename."""
    name = filename.lower()
    return any(keyword in name for keyword in CATEGORY_KEYWORDS.get(category, ()))


def categorize(filename: str) -> DocumentCategory:
    """First matching category in priority order, else GENERAL."""
    for category in CATEGORY_KEYWORDS:
        if matches_category(filename, category):
            return category
    return DocumentCategory.GENERAL


# ============================================================================
# Templates
# ============================================================================


@dataclass(frozen=True)
class ConflictTemplate:
    """Fixed text for one kind of synthesized conflict."""

    key: str
    title: str
    description: str  # formatted with {doc1}, {doc2}
    text1: str
    text2: str
    suggestion: str  # formatted with {doc1}, {doc2}
    conflict_type: ConflictType
    severity: ConflictSeverity | None  # None: drawn at random
    max_page: int
    max_line: int


POLICY_TEMPLATE = ConflictTemplate(
    key="policy_notice",
    title="Policy Implementation Discrepancy",
    description="Different implementation guidelines found between {doc1} and {doc2}",
    text1="Implementation must follow standard protocol with 48-hour advance notice",
    text2="All implementations require 72-hour advance notification to stakeholders",
    suggestion=(
        "Standardize implementation notice period across all policy documents. "
        "Consider updating {doc1} to match the 72-hour requirement in {doc2}."
    ),
    conflict_type=ConflictType.CONTRADICTION,
    severity=ConflictSeverity.HIGH,
    max_page=10,
    max_line=50,
)

ACADEMIC_TEMPLATE = ConflictTemplate(
    key="academic_completion",
    title="Academic Requirement Mismatch",
    description="Conflicting academic requirements found between {doc1} and {doc2}",
    text1="Minimum project completion requirement: 80% of total deliverables",
    text2="Students must complete at least 75% of project milestones for evaluation",
    suggestion=(
        "Clarify project completion requirements. Consider whether 80% is the "
        "standard with 75% as minimum threshold, or update documents for consistency."
    ),
    conflict_type=ConflictType.INCONSISTENCY,
    severity=ConflictSeverity.MEDIUM,
    max_page=15,
    max_line=40,
)

HR_TEMPLATE = ConflictTemplate(
    key="hr_leave_notice",
    title="Employment Policy Contradiction",
    description="Different employment policies specified in {doc1} and {doc2}",
    text1="Employee leave requests must be submitted 14 days in advance",
    text2="All leave applications require 21-day advance notice for processing",
    suggestion=(
        "Standardize leave request timeline across all HR documents. Update {doc1} "
        "to match the 21-day requirement or clarify different requirements for "
        "different leave types."
    ),
    conflict_type=ConflictType.CONTRADICTION,
    severity=ConflictSeverity.HIGH,
    max_page=8,
    max_line=30,
)

_GENERIC_DESCRIPTION = "Inconsistent requirements found between {doc1} and {doc2}"

GENERIC_TEMPLATES: tuple[ConflictTemplate, ...] = (
    ConflictTemplate(
        key="generic_timeline",
        title="Timeline Discrepancy",
        description=_GENERIC_DESCRIPTION,
        text1="Process completion deadline: 5 business days from submission",
        text2="Standard processing time: 7-10 business days for all requests",
        suggestion="Clarify processing timelines and ensure consistency across all documentation.",
        conflict_type=ConflictType.INCONSISTENCY,
        severity=None,
        max_page=12,
        max_line=35,
    ),
    ConflictTemplate(
        key="generic_approval_authority",
        title="Approval Authority Mismatch",
        description=_GENERIC_DESCRIPTION,
        text1="Department head approval required for all decisions",
        text2="Senior manager authorization sufficient for standard operations",
        suggestion=(
            "Define clear approval hierarchy and update documents to reflect "
            "consistent authority levels."
        ),
        conflict_type=ConflictType.INCONSISTENCY,
        severity=None,
        max_page=12,
        max_line=35,
    ),
    ConflictTemplate(
        key="generic_document_format",
        title="Documentation Format Inconsistency",
        description=_GENERIC_DESCRIPTION,
        text1="All submissions must be in PDF format with digital signatures",
        text2="Electronic submissions accepted in Word or PDF format",
        suggestion="Standardize document format requirements across all processes.",
        conflict_type=ConflictType.INCONSISTENCY,
        severity=None,
        max_page=12,
        max_line=35,
    ),
)


@dataclass(frozen=True)
class CategoryRule:
    """Fires `template` when `applies(doc1_name, doc2_name)` holds."""

    name: str
    applies: Callable[[str, str], bool]
    template: ConflictTemplate


# Evaluated in order; several rules may fire for the same pair.
CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        name="both_policy",
        applies=lambda a, b: (
            matches_category(a, DocumentCategory.POLICY)
            and matches_category(b, DocumentCategory.POLICY)
        ),
        template=POLICY_TEMPLATE,
    ),
    CategoryRule(
        name="either_academic",
        applies=lambda a, b: (
            matches_category(a, DocumentCategory.ACADEMIC)
            or matches_category(b, DocumentCategory.ACADEMIC)
        ),
        template=ACADEMIC_TEMPLATE,
    ),
    CategoryRule(
        name="either_hr",
        applies=lambda a, b: (
            matches_category(a, DocumentCategory.HR)
            or matches_category(b, DocumentCategory.HR)
        ),
        template=HR_TEMPLATE,
    ),
)

TEMPLATE_BY_TITLE: dict[str, ConflictTemplate] = {
    t.title: t for t in (POLICY_TEMPLATE, ACADEMIC_TEMPLATE, HR_TEMPLATE, *GENERIC_TEMPLATES)
}

# Lowest severity kept for each sensitivity level
SENSITIVITY_FLOOR: dict[AnalysisSensitivity, ConflictSeverity] = {
    AnalysisSensitivity.LOW: ConflictSeverity.MEDIUM,
    AnalysisSensitivity.MEDIUM: ConflictSeverity.LOW,
    AnalysisSensitivity.HIGH: ConflictSeverity.LOW,
}


# ============================================================================
# Conflict Classifier
# ============================================================================


class ConflictClassifier:
    """
    Synthesize conflicts for a pair of documents.

    Category selection is deterministic. Page/line numbers, ids and the
    generic fallback template come from the injected random source.

    Usage:
        classifier = ConflictClassifier(rng=random.Random(7))
        conflicts = classifier.classify(doc_a, doc_b)
    """

    def __init__(
        self,
        rng: RandomSource | None = None,
        clock: Clock | None = None,
        rules: tuple[CategoryRule, ...] = CATEGORY_RULES,
        generic_templates: tuple[ConflictTemplate, ...] = GENERIC_TEMPLATES,
    ) -> None:
        """
        Initialize the classifier.

        Args:
            rng: Random source for illustrative fields
            clock: Clock used for conflict ids
            rules: Category rules in priority order
            generic_templates: Fallback table when no rule fires
        """
        self.rng = rng or random.Random()
        self.clock = clock or utc_now
        self.rules = rules
        self.generic_templates = generic_templates

    def classify(
        self,
        doc1: Document,
        doc2: Document,
        sensitivity: AnalysisSensitivity = AnalysisSensitivity.MEDIUM,
    ) -> list[Conflict]:
        """
        Classify a document pair into zero or more conflicts.

        Args:
            doc1: First document (evidence source1)
            doc2: Second document (evidence source2)
            sensitivity: Drops rule conflicts below its severity floor. The
                generic fallback is raised to the floor instead of dropped.

        Returns:
            Conflicts in rule priority order
        """
        logger.debug(
            f"Classifying pair: {doc1.name} ({categorize(doc1.name).value}) vs "
            f"{doc2.name} ({categorize(doc2.name).value})"
        )

        floor = SENSITIVITY_FLOOR[sensitivity]
        matched = [
            self._build(rule.template, doc1, doc2)
            for rule in self.rules
            if rule.applies(doc1.name, doc2.name)
        ]
        conflicts = [c for c in matched if SEVERITY_RANK[c.severity] >= SEVERITY_RANK[floor]]

        if len(conflicts) < len(matched):
            logger.debug(
                f"Sensitivity '{sensitivity.value}' dropped "
                f"{len(matched) - len(conflicts)} low-severity conflicts"
            )

        if not conflicts:
            template = self.rng.choice(self.generic_templates)
            conflict = self._build(template, doc1, doc2)
            # The fallback is never filtered out; it is raised to the floor instead
            if SEVERITY_RANK[conflict.severity] < SEVERITY_RANK[floor]:
                conflict = conflict.model_copy(update={"severity": floor})
            conflicts.append(conflict)

        return conflicts

    def _build(
        self,
        template: ConflictTemplate,
        doc1: Document,
        doc2: Document,
    ) -> Conflict:
        """Instantiate a template against the real document names."""
        severity = template.severity
        if severity is None:
            severity = (
                ConflictSeverity.MEDIUM if self.rng.random() > 0.5 else ConflictSeverity.LOW
            )

        return Conflict(
            id=new_token("conflict", rng=self.rng, clock=self.clock),
            conflict_type=template.conflict_type,
            severity=severity,
            title=template.title,
            description=template.description.format(doc1=doc1.name, doc2=doc2.name),
            documents=ConflictSources(
                source1=self._excerpt(doc1, template.text1, template),
                source2=self._excerpt(doc2, template.text2, template),
            ),
            suggestion=template.suggestion.format(doc1=doc1.name, doc2=doc2.name),
            status=ConflictStatus.OPEN,
        )

    def _excerpt(
        self,
        document: Document,
        text: str,
        template: ConflictTemplate,
    ) -> ConflictSource:
        return ConflictSource(
            name=document.name,
            page=self.rng.randint(1, template.max_page),
            line=self.rng.randint(1, template.max_line),
            text=text,
        )
