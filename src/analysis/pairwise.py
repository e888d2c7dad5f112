"""
Pairwise Analyzer - All-Pairs Conflict Detection.

Enumerates every unordered document pair of a batch and flattens the
classifier's findings into one conflict list.
"""

from typing import Iterator, Sequence

from src.analysis.classifier import ConflictClassifier
from src.analysis.schemas import AnalysisSensitivity, Conflict, Document
from src.utils.logger import get_logger

logger = get_logger(__name__)


def iter_pairs(documents: Sequence[Document]) -> Iterator[tuple[Document, Document]]:
    """Yield (documents[i], documents[j]) for every i < j, in order."""
    for i in range(len(documents) - 1):
        for j in range(i + 1, len(documents)):
            yield documents[i], documents[j]


class PairwiseAnalyzer:
    """
    Run the classifier over all document pairs.

    Usage:
        analyzer = PairwiseAnalyzer(ConflictClassifier())
        conflicts = analyzer.analyze_batch(documents)
    """

    def __init__(self, classifier: ConflictClassifier | None = None) -> None:
        self.classifier = classifier or ConflictClassifier()

    def analyze_batch(
        self,
        documents: Sequence[Document],
        sensitivity: AnalysisSensitivity = AnalysisSensitivity.MEDIUM,
    ) -> list[Conflict]:
        """
        Detect conflicts across a batch.

        Args:
            documents: Batch in intake order
            sensitivity: Passed through to the classifier

        Returns:
            Conflicts in pair-enumeration order, not deduplicated.
            Empty when the batch holds fewer than 2 documents.
        """
        if len(documents) < 2:
            logger.info(f"Skipping pairwise analysis: {len(documents)} document(s) in batch")
            return []

        conflicts: list[Conflict] = []
        pair_count = 0

        for doc1, doc2 in iter_pairs(documents):
            conflicts.extend(self.classifier.classify(doc1, doc2, sensitivity))
            pair_count += 1

        logger.info(
            f"Pairwise analysis complete: {pair_count} pairs, {len(conflicts)} conflicts"
        )
        return conflicts
