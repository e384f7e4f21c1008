"""
Catalog Manager - Unified entry point for skilldex.

This module provides the CatalogManager class that coordinates corpus
scanning, Registry construction, progressive disclosure queries and content
rendering. It also generates the Markdown index views of the catalog.
"""

import asyncio
import json
import os
from pathlib import Path

from pydantic import BaseModel

from skilldex.catalog.exceptions import CatalogNotReadyError
from skilldex.catalog.models import Document, DocumentKind, ScanReport, Tier
from skilldex.catalog.registry import Registry
from skilldex.catalog.scanner import CorpusScanner
from skilldex.config.settings import SkilldexSettings, settings as default_settings
from skilldex.disclosure.cost import CostEstimator
from skilldex.disclosure.loader import DisclosureLoader, LoadPlan
from skilldex.utils.logging import get_logger

logger = get_logger(__name__)

_KIND_TITLES = {
    DocumentKind.SKILL: "Skills",
    DocumentKind.AGENT: "Agents",
    DocumentKind.COMMAND: "Commands",
}


class ContentBlock(BaseModel):
    """A piece of document content ready for injection into a context."""

    document_id: str
    tier: Tier
    title: str
    content: str


class CatalogManager:
    """
    Unified manager for the document catalog.

    Responsibilities:
    - Scan the corpus and build the Registry
    - Swap in a freshly built Registry on refresh
    - Answer disclosure queries and render their content
    - Generate index views of the catalog
    """

    def __init__(
        self,
        corpus_dirs: list[Path] | None = None,
        config: SkilldexSettings | None = None,
    ) -> None:
        """
        Initialize catalog manager.

        Args:
            corpus_dirs: Directories to scan; defaults to the configured ones
            config: Settings; defaults to the global settings
        """
        self.config = config or default_settings
        self._corpus_dirs = (
            list(corpus_dirs) if corpus_dirs is not None else list(self.config.corpus_dirs)
        )
        self.scanner = CorpusScanner(concurrency=self.config.scan_concurrency)
        self.estimator = CostEstimator.from_settings(self.config)
        self.loader = DisclosureLoader.from_settings(self.config)
        self._registry: Registry | None = None
        self._last_report: ScanReport | None = None
        self._refresh_lock = asyncio.Lock()

    @property
    def registry(self) -> Registry:
        if self._registry is None:
            raise CatalogNotReadyError("Catalog has not been initialized")
        return self._registry

    @property
    def is_ready(self) -> bool:
        return self._registry is not None

    @property
    def last_report(self) -> ScanReport | None:
        return self._last_report

    async def initialize(self) -> ScanReport:
        """
        Scan the corpus and build the Registry.

        The new Registry replaces the current one only once it has been
        fully validated; on failure the previous Registry stays in place.

        Returns:
            The scan report (registered documents and per-file failures)

        Raises:
            ScanTimeoutError: If the scan exceeds its deadline
            RegistryValidationError: If the document set is inconsistent
        """
        async with self._refresh_lock:
            corpus_dirs = self._resolve_corpus_dirs()
            report = await self.scanner.scan(
                corpus_dirs, timeout=self.config.scan_timeout_seconds
            )
            self._last_report = report
            registry = Registry.build(report.documents)
            self._check_costs(registry)
            self._registry = registry

        logger.info(
            "catalog_initialized",
            document_count=len(registry),
            failure_count=len(report.failures),
        )
        return report

    async def refresh(self) -> ScanReport:
        """Re-scan the corpus and swap in the new Registry."""
        return await self.initialize()

    def load(self, query: str, budget_tokens: int) -> LoadPlan:
        """Build a LoadPlan for a query against the current Registry."""
        return self.loader.load(query, budget_tokens, self.registry)

    def get(self, document_id: str) -> Document | None:
        return self.registry.get(document_id)

    def find_by_kind(self, kind: DocumentKind) -> list[Document]:
        return list(self.registry.find_by_kind(kind))

    async def render(self, plan: LoadPlan) -> list[ContentBlock]:
        """
        Render a LoadPlan into ordered content blocks.

        Tier-3 files are read from disk here, on demand.

        Raises:
            FileNotFoundError: If a planned extended file has disappeared
        """
        registry = self.registry
        blocks: list[ContentBlock] = []
        seen: set[tuple[str, Tier, str]] = set()

        def _add(block: ContentBlock) -> None:
            key = (block.document_id, block.tier, block.title)
            if key not in seen:
                seen.add(key)
                blocks.append(block)

        for entry in plan.entries:
            document = registry.require(entry.document_id)
            _add(
                ContentBlock(
                    document_id=document.id,
                    tier=Tier.SUMMARY,
                    title=document.name,
                    content="\n".join(f"- {line}" for line in document.summary_lines()),
                )
            )
            if entry.tier >= Tier.BODY and document.body:
                _add(
                    ContentBlock(
                        document_id=document.id,
                        tier=Tier.BODY,
                        title=document.name,
                        content=document.body,
                    )
                )
            for ext_path in entry.extensions:
                path = Path(ext_path)
                if not path.exists():
                    raise FileNotFoundError(
                        f"Extended file not found: {path} for document '{document.id}'"
                    )
                _add(
                    ContentBlock(
                        document_id=document.id,
                        tier=Tier.EXTENDED,
                        title=f"{document.name}/{path.name}",
                        content=path.read_text(encoding="utf-8"),
                    )
                )

        return blocks

    def render_index(self, kind: DocumentKind | None = None) -> str:
        """
        Generate a Markdown index of the catalog.

        Returns one table per kind (or only the requested kind) listing
        name, description, context cost and trigger phrases.
        """
        registry = self.registry
        kinds = [kind] if kind else list(DocumentKind)
        sections = []

        for current in kinds:
            documents = sorted(registry.find_by_kind(current), key=lambda d: d.name)
            if not documents:
                continue
            lines = [f"## {_KIND_TITLES[current]} ({len(documents)})", ""]
            lines.append("| Name | Description | Context cost | Load when |")
            lines.append("|------|-------------|--------------|-----------|")
            for doc in documents:
                lines.append(
                    f"| {_cell(doc.name)} | {_cell(doc.description)} "
                    f"| {doc.context_cost.value} | {_cell(', '.join(doc.load_when))} |"
                )
            sections.append("\n".join(lines))

        return "\n\n".join(sections)

    def _check_costs(self, registry: Registry) -> None:
        mismatches = 0
        for document in registry:
            assessment = self.estimator.assess(document)
            if not assessment.consistent:
                mismatches += 1
                logger.debug(
                    "context_cost_mismatch",
                    document_id=document.id,
                    declared=assessment.declared.value,
                    estimated=assessment.estimated.value,
                    body_tokens=assessment.body_tokens,
                )
        if mismatches:
            logger.info("context_cost_mismatches", count=mismatches)

    def _resolve_corpus_dirs(self) -> list[Path]:
        """
        Resolve corpus directories from configuration and environment.

        Returns:
            List of resolved Path objects
        """
        dirs: list[Path] = []

        for corpus_dir in [*self._corpus_dirs, *_iter_corpus_dirs_from_env()]:
            resolved = Path(corpus_dir).expanduser().resolve()
            if resolved.exists():
                dirs.append(resolved)
            else:
                logger.debug("corpus_dir_not_found", path=str(resolved))

        return dirs


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def _iter_corpus_dirs_from_env() -> list[str]:
    raw = os.getenv("SKILLDEX_CORPUS_PATH")
    if not raw:
        return []

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        parsed = None

    if isinstance(parsed, list):
        items = parsed
    elif isinstance(parsed, str):
        items = [parsed]
    elif parsed is None:
        items = raw.split(",")
    else:
        items = [raw]

    return [str(item).strip() for item in items if str(item).strip()]
