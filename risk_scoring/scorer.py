"""
Risk Scoring Engine - Document Scorer.

============================================================
PURPOSE
============================================================
Scores one aggregated text corpus against an indicator
catalog.

============================================================
ASSESSMENT LOGIC PATTERN
============================================================
corpus = casefold(join(document contents))

For each indicator:
    matched = count of trigger phrases present in corpus
              (presence, not frequency)
    normalized = min(1, matched / total_phrases * weight)

overall = clamp(sum(normalized_i * combination_weight_i), 0, 1)

triggered = indicators with normalized > trigger_threshold

============================================================
DESIGN PRINCIPLES
============================================================
- Pure functions: same input = same output
- No external state or side effects
- Literal keyword containment only
- Empty input is a valid zero result

============================================================
"""

from typing import Dict, List, Sequence, Tuple

from .catalogs import Catalog
from .types import Document, IndicatorDefinition, IndicatorScore, OverallScore


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def build_corpus(documents: Sequence[Document]) -> str:
    """Case-folded concatenation of all document contents."""
    return " ".join(d.content for d in documents).casefold()


def unique_sources(documents: Sequence[Document]) -> Tuple[str, ...]:
    """Source names in first-seen order."""
    seen: Dict[str, None] = {}
    for document in documents:
        if document.source:
            seen.setdefault(document.source, None)
    return tuple(seen)


class DocumentScorer:
    """
    Scores document batches against a catalog.

    Stateless; one instance may be shared across requests.
    """

    def score_indicator(
        self,
        corpus: str,
        definition: IndicatorDefinition,
    ) -> IndicatorScore:
        """
        Score a single indicator against a prepared corpus.

        Args:
            corpus: Case-folded corpus text
            definition: Indicator to score

        Returns:
            IndicatorScore with normalized score in [0, 1]
        """
        matched = tuple(p for p in definition.trigger_phrases if p in corpus)
        total = definition.phrase_count
        ratio = len(matched) / total if total else 0.0
        return IndicatorScore(
            indicator_name=definition.name,
            raw_match_count=len(matched),
            normalized_score=_clamp(ratio * definition.weight),
            matched_phrases=matched,
        )

    def score(
        self,
        documents: Sequence[Document],
        catalog: Catalog,
    ) -> OverallScore:
        """
        Score a batch of documents.

        Args:
            documents: Documents to score (may be empty)
            catalog: Catalog to score against

        Returns:
            OverallScore; all zeros for an empty batch
        """
        corpus = build_corpus(documents)

        per_indicator: Dict[str, IndicatorScore] = {}
        triggered: List[str] = []
        total = 0.0

        for definition in catalog.indicators:
            indicator_score = self.score_indicator(corpus, definition)
            per_indicator[definition.name] = indicator_score
            total += indicator_score.normalized_score * catalog.combination_weight(definition.name)

            if indicator_score.normalized_score > catalog.trigger_threshold:
                triggered.append(definition.name)

        return OverallScore(
            value=_clamp(total),
            triggered_indicators=tuple(triggered),
            per_indicator=per_indicator,
            sources=unique_sources(documents),
            document_count=len(documents),
            catalog_id=catalog.catalog_id,
        )

    def has_any_trigger(self, document: Document, catalog: Catalog) -> bool:
        """True if the document contains at least one catalog phrase."""
        text = document.content.casefold()
        return any(phrase in text for phrase in catalog.all_phrases)


def score_documents(documents: Sequence[Document], catalog: Catalog) -> OverallScore:
    """Convenience function to score a batch in one call."""
    return DocumentScorer().score(documents, catalog)
