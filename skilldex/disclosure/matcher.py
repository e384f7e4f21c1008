"""
Trigger Matcher - Match free-text queries against load_when phrases.

A phrase matches when it is a substring of the query or the query is a
substring of it. The score is the length of the shorter string over the
length of the longer one, so an exact match scores 1.0. Optional fuzzy
matching scores difflib similarity scaled by fuzzy_weight.
"""

import difflib
from dataclasses import dataclass

from skilldex.catalog.models import Document
from skilldex.catalog.registry import Registry
from skilldex.config.settings import SkilldexSettings, settings as default_settings


@dataclass(frozen=True)
class TriggerMatch:
    """A document selected by a query, with its best phrase and score."""

    document: Document
    score: float
    phrase: str
    fuzzy: bool = False


def normalize_text(text: str) -> str:
    """Lowercase, trim and collapse whitespace."""
    return " ".join(text.lower().split())


class TriggerMatcher:
    """Scores documents against a query using their declared trigger phrases."""

    def __init__(self, fuzzy_threshold: float = 0.0, fuzzy_weight: float = 0.5) -> None:
        if not 0.0 <= fuzzy_threshold <= 1.0:
            raise ValueError("fuzzy_threshold must be between 0 and 1")
        if not 0.0 < fuzzy_weight < 1.0:
            raise ValueError("fuzzy_weight must be between 0 and 1 (exclusive)")
        self.fuzzy_threshold = fuzzy_threshold
        self.fuzzy_weight = fuzzy_weight

    @classmethod
    def from_settings(cls, config: SkilldexSettings | None = None) -> "TriggerMatcher":
        config = config or default_settings
        return cls(fuzzy_threshold=config.fuzzy_threshold, fuzzy_weight=config.fuzzy_weight)

    def match(self, query: str, registry: Registry) -> list[TriggerMatch]:
        """
        Find documents whose trigger phrases match a query.

        Args:
            query: Free-text request
            registry: Registry to search

        Returns:
            Matches ordered by score (desc), context cost (asc), then name
        """
        normalized = normalize_text(query)
        if not normalized:
            return []

        matches = []
        for document in registry:
            best = self.score_document(normalized, document)
            if best is not None:
                matches.append(best)

        matches.sort(key=lambda m: (-m.score, m.document.context_cost.rank, m.document.name))
        return matches

    def score_document(self, normalized_query: str, document: Document) -> TriggerMatch | None:
        """Best match of a normalized query against one document's phrases."""
        best: TriggerMatch | None = None
        for raw_phrase in document.load_when:
            phrase = normalize_text(raw_phrase)
            if not phrase:
                continue

            candidate = self._score_phrase(normalized_query, phrase)
            if candidate is None:
                continue
            score, fuzzy = candidate
            if best is None or score > best.score:
                best = TriggerMatch(document=document, score=score, phrase=raw_phrase, fuzzy=fuzzy)
        return best

    def _score_phrase(self, query: str, phrase: str) -> tuple[float, bool] | None:
        if phrase in query:
            return len(phrase) / len(query), False
        if query in phrase:
            return len(query) / len(phrase), False

        if self.fuzzy_threshold > 0.0:
            ratio = difflib.SequenceMatcher(None, query, phrase).ratio()
            if ratio >= self.fuzzy_threshold:
                return ratio * self.fuzzy_weight, True
        return None
