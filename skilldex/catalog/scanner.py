"""
Corpus Scanner - One-time batch read of a marketplace corpus.

Walks corpus directories for document files, reads and parses them
concurrently, and reports per-file failures without aborting the scan.
The whole scan is bounded by an optional deadline.
"""

import asyncio
from pathlib import Path

from skilldex.catalog.exceptions import DocumentParseError, ScanTimeoutError
from skilldex.catalog.models import Document, ScanFailure, ScanReport
from skilldex.catalog.parser import DocumentParser, infer_kind
from skilldex.utils.logging import get_logger, scan_context

logger = get_logger(__name__)

DOCUMENT_DIRS = ("agents", "commands")
SKILL_FILENAME = "SKILL.md"
IGNORED_FILENAMES = {"readme.md", "changelog.md", "license.md"}


class CorpusScanner:
    """
    Scanner that turns corpus directories into a ScanReport.

    A document file is either a SKILL.md file, or any Markdown file below
    an agents/ or commands/ directory.
    """

    def __init__(self, parser: DocumentParser | None = None, concurrency: int = 16) -> None:
        self.parser = parser or DocumentParser()
        self._concurrency = concurrency

    async def scan(
        self, corpus_dirs: list[Path], timeout: float | None = None
    ) -> ScanReport:
        """
        Scan corpus directories.

        Args:
            corpus_dirs: Directories to scan recursively
            timeout: Deadline for the whole scan in seconds, None for no limit

        Returns:
            ScanReport with parsed documents and per-file failures

        Raises:
            ScanTimeoutError: If the deadline expires; no partial report is returned
        """
        with scan_context():
            try:
                report = await asyncio.wait_for(self._scan(corpus_dirs), timeout)
            except asyncio.TimeoutError as e:
                logger.error("corpus_scan_timeout", timeout=timeout)
                raise ScanTimeoutError(
                    f"Corpus scan exceeded {timeout}s deadline"
                ) from e

            logger.info(
                "corpus_scan_complete",
                document_count=len(report.documents),
                failure_count=len(report.failures),
            )
            return report

    async def _scan(self, corpus_dirs: list[Path]) -> ScanReport:
        files = await asyncio.to_thread(self.collect_files, corpus_dirs)
        semaphore = asyncio.Semaphore(self._concurrency)

        async def _bounded(item: tuple[Path, Path]) -> Document | ScanFailure:
            async with semaphore:
                return await asyncio.to_thread(self._load_file, *item)

        results = await asyncio.gather(*(_bounded(item) for item in files))

        report = ScanReport()
        for result in results:
            if isinstance(result, ScanFailure):
                report.failures.append(result)
            else:
                report.documents.append(result)
        return report

    def collect_files(self, corpus_dirs: list[Path]) -> list[tuple[Path, Path]]:
        """
        List document files as (root, file) pairs in a stable order.

        Missing roots are logged and skipped.
        """
        seen: set[Path] = set()
        files: list[tuple[Path, Path]] = []

        for corpus_dir in corpus_dirs:
            root = Path(corpus_dir).expanduser().resolve()
            if not root.exists():
                logger.warning("corpus_dir_not_found", path=str(root))
                continue

            if not root.is_dir():
                logger.warning("corpus_dir_not_directory", path=str(root))
                continue

            for file_path in sorted(root.rglob("*.md")):
                if file_path in seen or not file_path.is_file():
                    continue
                if is_document_file(file_path.relative_to(root)):
                    seen.add(file_path)
                    files.append((root, file_path))

        return files

    def _load_file(self, root: Path, file_path: Path) -> Document | ScanFailure:
        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("document_read_failed", path=str(file_path), error=str(e))
            return ScanFailure(
                path=str(file_path), error_type=type(e).__name__, reason=str(e)
            )

        try:
            document = self.parser.parse(
                text,
                path=str(file_path),
                kind=infer_kind(str(file_path.relative_to(root))),
            )
        except DocumentParseError as e:
            logger.warning(
                "document_parse_failed",
                path=str(file_path),
                error_type=type(e).__name__,
                error=str(e),
            )
            return ScanFailure(
                path=str(file_path), error_type=type(e).__name__, reason=str(e)
            )

        logger.debug("document_discovered", document_id=document.id, path=str(file_path))
        return with_extension_sizes(document)


def is_document_file(relative_path: Path) -> bool:
    """Decide whether a corpus-relative Markdown path holds a document."""
    if relative_path.name == SKILL_FILENAME:
        return True
    if relative_path.name.lower() in IGNORED_FILENAMES:
        return False
    return any(part.lower() in DOCUMENT_DIRS for part in relative_path.parts[:-1])


def with_extension_sizes(document: Document) -> Document:
    """Fill in Tier-3 file sizes from the filesystem without reading content."""
    if not document.extended_files:
        return document

    refs = []
    for ref in document.extended_files:
        try:
            size = Path(ref.path).stat().st_size
        except OSError:
            logger.debug(
                "extended_file_missing", document_id=document.id, path=ref.path
            )
            size = None
        refs.append(ref.model_copy(update={"size_bytes": size}))
    return document.model_copy(update={"extended_files": tuple(refs)})
