"""
Disclosure Loader - Budgeted, tiered selection of document content.

Given a query and a token budget, the loader selects which documents to
disclose and how deep: Tier 1 (summary), Tier 2 (body) or Tier 3 (extended
files). Selection walks a fixed sequence of steps:

1. Tier 1 for every matched document, then for every pulled-in document
2. Tier 2 by match score (desc), context cost (asc), name (asc)
3. Tier 3 for files the query names explicitly, then for see-also files
   when the remaining budget exceeds twice the document's Tier-2 cost

Tier-1 and Tier-2 steps are admitted while they fit. After the first step
that does not fit, nothing else is admitted except the Tier-1 summaries of
documents the query matched directly, which are always included.

Tier 3 runs only when every earlier step fitted. Each candidate file reserves
its cost in order, admitted or not, and is admitted when the reservation up to
and including it fits in what Tier 2 left over. "Remaining budget" for the
see-also gate is that leftover minus the files reserved before it. A larger
budget therefore only ever adds files to a plan.
"""

import re
from dataclasses import dataclass, field

from pydantic import BaseModel, Field

from skilldex.catalog.models import Document, ExtensionRef, Tier
from skilldex.catalog.registry import Registry
from skilldex.config.settings import SkilldexSettings, settings as default_settings
from skilldex.disclosure.cost import CostEstimator
from skilldex.disclosure.matcher import TriggerMatch, TriggerMatcher, normalize_text
from skilldex.disclosure.resolver import DependencyResolver
from skilldex.utils.logging import get_logger

logger = get_logger(__name__)


class PlanEntry(BaseModel):
    """One document in a LoadPlan and the deepest tier reached for it."""

    document_id: str
    tier: Tier
    estimated_tokens: int
    score: float
    matched: bool  # Selected directly by a trigger phrase
    extensions: list[str] = Field(default_factory=list)  # Tier-3 file paths


class LoadPlan(BaseModel):
    """Ordered selection of document tiers for one query."""

    query: str
    budget_tokens: int
    entries: list[PlanEntry] = Field(default_factory=list)
    total_estimated_tokens: int = 0
    over_budget: bool = False

    def document_ids(self) -> list[str]:
        return [entry.document_id for entry in self.entries]

    def get(self, document_id: str) -> PlanEntry | None:
        for entry in self.entries:
            if entry.document_id == document_id:
                return entry
        return None


@dataclass
class _Budget:
    limit: int
    spent: int = 0
    exhausted: bool = False

    @property
    def remaining(self) -> int:
        return self.limit - self.spent

    def admit(self, cost: int, mandatory: bool = False) -> bool:
        if not self.exhausted and self.spent + cost <= self.limit:
            self.spent += cost
            return True
        self.exhausted = True
        if mandatory:
            self.spent += cost
            return True
        return False


@dataclass
class _Selection:
    document: Document
    score: float
    matched: bool
    tier: Tier | None = None
    tokens: int = 0
    extensions: list[str] = field(default_factory=list)


class DisclosureLoader:
    """
    Builds LoadPlans from queries.

    Responsibilities:
    - Match the query to documents
    - Expand matches with their requires closure
    - Select tiers within the token budget
    """

    def __init__(
        self,
        matcher: TriggerMatcher | None = None,
        resolver: DependencyResolver | None = None,
        estimator: CostEstimator | None = None,
        include_enhances: bool = False,
    ) -> None:
        self.matcher = matcher or TriggerMatcher()
        self.resolver = resolver or DependencyResolver()
        self.estimator = estimator or CostEstimator()
        self.include_enhances = include_enhances

    @classmethod
    def from_settings(cls, config: SkilldexSettings | None = None) -> "DisclosureLoader":
        config = config or default_settings
        return cls(
            matcher=TriggerMatcher.from_settings(config),
            estimator=CostEstimator.from_settings(config),
            include_enhances=config.include_enhances,
        )

    def load(self, query: str, budget_tokens: int, registry: Registry) -> LoadPlan:
        """
        Select document content for a query within a token budget.

        Args:
            query: Free-text request from the host runtime
            budget_tokens: Remaining context budget; zero or less selects
                only the Tier-1 summary of the best match
            registry: Registry to load from

        Returns:
            LoadPlan; empty when nothing matches
        """
        matches = self.matcher.match(query, registry)
        if not matches:
            logger.debug("load_plan_no_match", query=query, budget_tokens=budget_tokens)
            return LoadPlan(query=query, budget_tokens=budget_tokens)

        if budget_tokens <= 0:
            plan = self._summary_only(query, budget_tokens, matches[0])
        else:
            plan = self._plan(query, budget_tokens, matches, registry)

        logger.info(
            "load_plan_built",
            query=query,
            match_count=len(matches),
            entry_count=len(plan.entries),
            total_tokens=plan.total_estimated_tokens,
            budget_tokens=budget_tokens,
            over_budget=plan.over_budget,
        )
        return plan

    def _summary_only(self, query: str, budget_tokens: int, top: TriggerMatch) -> LoadPlan:
        cost = self.estimator.summary_tokens(top.document)
        entry = PlanEntry(
            document_id=top.document.id,
            tier=Tier.SUMMARY,
            estimated_tokens=cost,
            score=top.score,
            matched=True,
        )
        return LoadPlan(
            query=query,
            budget_tokens=budget_tokens,
            entries=[entry],
            total_estimated_tokens=cost,
            over_budget=cost > budget_tokens,
        )

    def _plan(
        self,
        query: str,
        budget_tokens: int,
        matches: list[TriggerMatch],
        registry: Registry,
    ) -> LoadPlan:
        candidates = self._candidates(matches, registry)
        budget = _Budget(limit=budget_tokens)

        summary_order = [s for s in candidates if s.matched] + [
            s for s in candidates if not s.matched
        ]
        for selection in summary_order:
            cost = self.estimator.summary_tokens(selection.document)
            if budget.admit(cost, mandatory=selection.matched):
                selection.tier = Tier.SUMMARY
                selection.tokens += cost

        by_relevance = sorted(
            (s for s in candidates if s.tier is not None),
            key=lambda s: (-s.score, s.document.context_cost.rank, s.document.name),
        )
        body_costs = {s.document.id: self.estimator.body_tokens(s.document) for s in by_relevance}
        for selection in by_relevance:
            cost = body_costs[selection.document.id]
            if budget.admit(cost):
                selection.tier = Tier.BODY
                selection.tokens += cost

        if not budget.exhausted:
            self._select_extensions(query, by_relevance, body_costs, budget)

        entries = [
            PlanEntry(
                document_id=s.document.id,
                tier=s.tier,
                estimated_tokens=s.tokens,
                score=s.score,
                matched=s.matched,
                extensions=list(s.extensions),
            )
            for s in candidates
            if s.tier is not None
        ]
        return LoadPlan(
            query=query,
            budget_tokens=budget_tokens,
            entries=entries,
            total_estimated_tokens=budget.spent,
            over_budget=budget.spent > budget_tokens,
        )

    def _candidates(
        self, matches: list[TriggerMatch], registry: Registry
    ) -> list[_Selection]:
        matched_scores = {m.document.id: m.score for m in matches}
        ordered_ids = self.resolver.expand(
            list(matched_scores), registry, include_enhances=self.include_enhances
        )

        # Pulled-in documents inherit the best score of a match that needs them.
        scores = dict(matched_scores)
        for match in matches:
            for document_id in self.resolver.expand([match.document.id], registry):
                scores.setdefault(document_id, match.score)
            if self.include_enhances:
                for document_id in match.document.enhances:
                    scores.setdefault(document_id, match.score)

        return [
            _Selection(
                document=registry.require(document_id),
                score=scores.get(document_id, 0.0),
                matched=document_id in matched_scores,
            )
            for document_id in ordered_ids
        ]

    def _select_extensions(
        self,
        query: str,
        selections: list[_Selection],
        body_costs: dict[str, int],
        budget: _Budget,
    ) -> None:
        normalized_query = normalize_text(query)
        named = [
            (s, ref)
            for s in selections
            for ref in s.document.extended_files
            if names_extension(normalized_query, ref)
        ]
        named_keys = {(s.document.id, ref.path) for s, ref in named}
        see_also = [
            (s, ref)
            for s in selections
            for ref in s.document.extended_files
            if ref.see_also and (s.document.id, ref.path) not in named_keys
        ]

        available = budget.remaining
        reserved = 0
        for selection, ref in named + see_also:
            gated = (
                (selection.document.id, ref.path) not in named_keys
                and available - reserved <= 2 * body_costs[selection.document.id]
            )
            cost = self.estimator.extension_tokens(ref)
            reserved += cost
            if gated or reserved > available:
                continue
            budget.spent += cost
            selection.tier = Tier.EXTENDED
            selection.tokens += cost
            selection.extensions.append(ref.path)


def names_extension(normalized_query: str, ref: ExtensionRef) -> bool:
    """Whether a normalized query names a Tier-3 file by file name or stem."""
    if ref.filename.lower() in normalized_query:
        return True
    stem = ref.name.lower()
    variants = {stem, stem.replace("-", " ").replace("_", " ")}
    return any(
        re.search(rf"(?<![\w-]){re.escape(variant)}(?![\w-])", normalized_query)
        for variant in variants
        if variant
    )
