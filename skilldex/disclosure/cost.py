"""
Cost Estimator - Token estimates per disclosure tier.

Estimates are heuristics: Tier 1 is a constant per summary line, Tier 2 and
Tier 3 are character counts divided by a characters-per-token ratio.
"""

import math
from dataclasses import dataclass

from skilldex.catalog.models import ContextCost, Document, ExtensionRef
from skilldex.config.settings import SkilldexSettings, settings as default_settings


@dataclass(frozen=True)
class CostAssessment:
    """Declared context cost of a document versus its estimated class."""

    document_id: str
    declared: ContextCost
    estimated: ContextCost
    body_tokens: int

    @property
    def consistent(self) -> bool:
        return self.declared == self.estimated


class CostEstimator:
    """Assigns token estimates and context-cost classes to documents."""

    def __init__(
        self,
        summary_line_tokens: int = 12,
        chars_per_token: int = 4,
        extended_file_default_tokens: int = 800,
        low_cost_max_tokens: int = 1500,
        medium_cost_max_tokens: int = 5000,
    ) -> None:
        if summary_line_tokens < 1 or chars_per_token < 1:
            raise ValueError("summary_line_tokens and chars_per_token must be positive")
        self.summary_line_tokens = summary_line_tokens
        self.chars_per_token = chars_per_token
        self.extended_file_default_tokens = extended_file_default_tokens
        self.low_cost_max_tokens = low_cost_max_tokens
        self.medium_cost_max_tokens = medium_cost_max_tokens

    @classmethod
    def from_settings(cls, config: SkilldexSettings | None = None) -> "CostEstimator":
        config = config or default_settings
        return cls(
            summary_line_tokens=config.summary_line_tokens,
            chars_per_token=config.chars_per_token,
            extended_file_default_tokens=config.extended_file_default_tokens,
            low_cost_max_tokens=config.low_cost_max_tokens,
            medium_cost_max_tokens=config.medium_cost_max_tokens,
        )

    def summary_tokens(self, document: Document) -> int:
        """Tier-1 estimate; an empty summary costs one line for the description."""
        return self.summary_line_tokens * len(document.summary_lines())

    def body_tokens(self, document: Document) -> int:
        """Tier-2 estimate."""
        return self.text_tokens(document.body)

    def extension_tokens(self, ref: ExtensionRef) -> int:
        """Tier-3 estimate for one referenced file."""
        if ref.size_bytes is None:
            return self.extended_file_default_tokens
        return math.ceil(ref.size_bytes / self.chars_per_token)

    def text_tokens(self, text: str) -> int:
        return math.ceil(len(text) / self.chars_per_token)

    def classify(self, document: Document) -> ContextCost:
        """Estimate the context-cost class from the Tier-2 size."""
        tokens = self.body_tokens(document)
        if tokens <= self.low_cost_max_tokens:
            return ContextCost.LOW
        if tokens <= self.medium_cost_max_tokens:
            return ContextCost.MEDIUM
        return ContextCost.HIGH

    def assess(self, document: Document) -> CostAssessment:
        """Compare the declared context cost with the estimated one."""
        return CostAssessment(
            document_id=document.id,
            declared=document.context_cost,
            estimated=self.classify(document),
            body_tokens=self.body_tokens(document),
        )
