"""
Dependency Resolver - Expand documents with their prerequisites.

requires edges are followed transitively and emitted in topological order
(dependencies before dependents). enhances edges are soft: when requested,
only the direct targets of the seeds are appended, without recursion.
"""

from collections.abc import Sequence

from skilldex.catalog.exceptions import DependencyCycleError
from skilldex.catalog.registry import Registry
from skilldex.utils.logging import get_logger

logger = get_logger(__name__)


class DependencyResolver:
    """Computes ordered dependency closures over a Registry."""

    def expand(
        self,
        seed_ids: Sequence[str],
        registry: Registry,
        include_enhances: bool = False,
    ) -> list[str]:
        """
        Expand seed documents to include their requires closure.

        Args:
            seed_ids: Requested document ids, in query order
            registry: Registry holding the documents
            include_enhances: Also append direct enhances targets of the seeds

        Returns:
            Ordered, de-duplicated document ids

        Raises:
            DocumentNotFoundError: If a seed id is unknown
            DependencyCycleError: If a requires cycle is found
        """
        seeds = list(dict.fromkeys(seed_ids))
        for seed in seeds:
            registry.require(seed)

        ordered: list[str] = []
        emitted: set[str] = set()
        for seed in seeds:
            self._visit(seed, registry, ordered, emitted)

        if include_enhances:
            for seed in seeds:
                for target in registry.require(seed).enhances:
                    if target not in emitted and target in registry:
                        emitted.add(target)
                        ordered.append(target)

        return ordered

    def _visit(
        self,
        root: str,
        registry: Registry,
        ordered: list[str],
        emitted: set[str],
    ) -> None:
        if root in emitted:
            return

        path = [root]
        on_stack = {root}
        stack = [(root, iter(registry.require(root).requires))]
        while stack:
            node, children = stack[-1]
            child = next(children, None)
            if child is None:
                stack.pop()
                path.pop()
                on_stack.discard(node)
                emitted.add(node)
                ordered.append(node)
                continue
            if child in on_stack:
                cycle = path[path.index(child):] + [child]
                logger.error("requires_cycle_at_resolution", cycle=cycle)
                raise DependencyCycleError(cycle)
            if child in emitted:
                continue
            stack.append((child, iter(registry.require(child).requires)))
            path.append(child)
            on_stack.add(child)
