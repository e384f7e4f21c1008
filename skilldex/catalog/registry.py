"""
Registry - Immutable catalog of marketplace documents.

A Registry is built once from a parsed document set. Construction validates
the whole set and either succeeds completely or raises; a built Registry is
never mutated, so any number of readers can share it. Rebuilding produces a
new instance.
"""

from collections.abc import Iterable, Iterator
from types import MappingProxyType

from skilldex.catalog.exceptions import (
    CyclicRequiresError,
    DanglingReferenceError,
    DocumentNotFoundError,
    DuplicateNameError,
)
from skilldex.catalog.models import Document, DocumentKind
from skilldex.utils.logging import get_logger

logger = get_logger(__name__)


class Registry:
    """
    Read-only catalog of documents keyed by id.

    Responsibilities:
    - Validate names, references and the requires graph at build time
    - Look up documents by id, name, kind and tag
    """

    def __init__(self, documents: dict[str, Document]) -> None:
        """Use Registry.build() to construct a validated Registry."""
        self._documents = MappingProxyType(dict(documents))
        by_kind: dict[DocumentKind, list[str]] = {kind: [] for kind in DocumentKind}
        by_tag: dict[str, list[str]] = {}
        by_name: dict[tuple[DocumentKind, str], str] = {}
        for doc in self._documents.values():
            by_kind[doc.kind].append(doc.id)
            by_name.setdefault((doc.kind, doc.name), doc.id)
            for tag in doc.tags:
                by_tag.setdefault(tag, []).append(doc.id)
        self._by_kind = MappingProxyType({k: tuple(v) for k, v in by_kind.items()})
        self._by_tag = MappingProxyType({k: tuple(v) for k, v in by_tag.items()})
        self._by_name = MappingProxyType(by_name)

    @classmethod
    def build(cls, documents: Iterable[Document]) -> "Registry":
        """
        Validate a document set and build a Registry from it.

        Args:
            documents: Parsed documents

        Returns:
            A new immutable Registry

        Raises:
            DuplicateNameError: If two documents share (kind, name)
            DanglingReferenceError: If requires/enhances names an unknown id
            CyclicRequiresError: If the requires graph has a cycle
        """
        index: dict[str, Document] = {}
        by_name: dict[tuple[DocumentKind, str], Document] = {}
        duplicates: list[tuple[Document, Document]] = []
        for doc in documents:
            existing = index.get(doc.id) or by_name.get((doc.kind, doc.name))
            if existing is not None:
                duplicates.append((existing, doc))
                continue
            index[doc.id] = doc
            by_name[(doc.kind, doc.name)] = doc

        if duplicates:
            ids = sorted({d.id for pair in duplicates for d in pair})
            logger.error("registry_duplicate_names", document_ids=ids)
            raise DuplicateNameError(
                "Duplicate document names within a kind: "
                + "; ".join(
                    f"{first.id} ({first.path or '<text>'} and {second.path or '<text>'})"
                    for first, second in duplicates
                ),
                ids,
            )

        dangling: list[tuple[str, str, str]] = []
        for doc in index.values():
            for relation, targets in (("requires", doc.requires), ("enhances", doc.enhances)):
                for target in targets:
                    if target not in index:
                        dangling.append((doc.id, relation, target))

        if dangling:
            ids = sorted({doc_id for doc_id, _, _ in dangling} | {t for _, _, t in dangling})
            logger.error("registry_dangling_references", document_ids=ids)
            raise DanglingReferenceError(
                "Dangling references: "
                + "; ".join(f"{src} {rel} missing {dst}" for src, rel, dst in dangling),
                ids,
            )

        cycle = find_requires_cycle(index)
        if cycle:
            logger.error("registry_requires_cycle", cycle=cycle)
            raise CyclicRequiresError(
                f"Cyclic requires: {' -> '.join(cycle)}", cycle[:-1]
            )

        registry = cls(index)
        logger.debug("registry_built", document_count=len(registry))
        return registry

    def get(self, document_id: str) -> Document | None:
        """
        Get a document by id.

        Returns:
            Document if found, None otherwise
        """
        return self._documents.get(document_id)

    def require(self, document_id: str) -> Document:
        """
        Get a document by id, raising when it is unknown.

        Raises:
            DocumentNotFoundError: If no document has this id
        """
        doc = self._documents.get(document_id)
        if doc is None:
            raise DocumentNotFoundError(document_id)
        return doc

    def get_by_name(self, name: str, kind: DocumentKind | None = None) -> Document | None:
        """
        Get a document by its declared name.

        Without a kind, skills are preferred, then agents, then commands.
        """
        kinds = [kind] if kind else list(DocumentKind)
        for candidate in kinds:
            document_id = self._by_name.get((candidate, name))
            if document_id is not None:
                return self._documents[document_id]
        return None

    def find_by_kind(self, kind: DocumentKind) -> Iterator[Document]:
        """Lazily yield all documents of a kind."""
        for document_id in self._by_kind.get(kind, ()):
            yield self._documents[document_id]

    def find_by_tag(self, tag: str) -> Iterator[Document]:
        """Lazily yield all documents carrying a tag (case-insensitive)."""
        for document_id in self._by_tag.get(tag.strip().lower(), ()):
            yield self._documents[document_id]

    def ids(self) -> list[str]:
        """List all document ids."""
        return list(self._documents.keys())

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._documents

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents.values())

    def __len__(self) -> int:
        return len(self._documents)


def find_requires_cycle(documents: "dict[str, Document] | MappingProxyType") -> list[str] | None:
    """
    Find a cycle in the requires graph.

    Depth-first traversal with an explicit recursion stack; a back-edge to a
    node currently on the stack closes a cycle.

    Returns:
        The cycle as a path whose first and last ids are equal, or None
    """
    visited: set[str] = set()
    on_stack: set[str] = set()

    for root in sorted(documents):
        if root in visited:
            continue
        stack: list[tuple[str, Iterator[str]]] = [(root, iter(documents[root].requires))]
        path = [root]
        on_stack.add(root)
        while stack:
            node, children = stack[-1]
            child = next(children, None)
            if child is None:
                stack.pop()
                path.pop()
                on_stack.discard(node)
                visited.add(node)
                continue
            if child in on_stack:
                return path[path.index(child):] + [child]
            if child in visited or child not in documents:
                continue
            stack.append((child, iter(documents[child].requires)))
            path.append(child)
            on_stack.add(child)
    return None
