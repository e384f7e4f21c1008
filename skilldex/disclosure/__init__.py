"""
Progressive disclosure - Trigger matching, dependency expansion and
budgeted tier selection over a Registry.
"""

from skilldex.disclosure.cost import CostAssessment, CostEstimator
from skilldex.disclosure.loader import DisclosureLoader, LoadPlan, PlanEntry
from skilldex.disclosure.matcher import TriggerMatch, TriggerMatcher
from skilldex.disclosure.resolver import DependencyResolver

__all__ = [
    "CostAssessment",
    "CostEstimator",
    "DisclosureLoader",
    "LoadPlan",
    "PlanEntry",
    "TriggerMatch",
    "TriggerMatcher",
    "DependencyResolver",
]
