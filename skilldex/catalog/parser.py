"""
Document Parser - Frontmatter and body tier extraction.

Splits a marketplace Markdown document into its YAML metadata block and its
body, validates the metadata, and records Tier-3 file references found in
the body without reading them. Parsing is a pure function of its input.
"""

import posixpath
import re
from pathlib import PurePosixPath
from typing import Any

import yaml

from skilldex.catalog.exceptions import (
    MalformedMetadataError,
    MissingFieldError,
    SummaryTooComplexError,
)
from skilldex.catalog.models import (
    ContextCost,
    Document,
    DocumentKind,
    ExtensionRef,
    make_document_id,
)

_FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\n(.*?)^---[ \t]*(?:\n|\Z)(.*)\Z", re.DOTALL | re.MULTILINE
)
_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
_FENCE_RE = re.compile(r"```|~~~")
_LINK_RE = re.compile(r"\[[^\]]*\]\(([^)\s#]+\.md)(?:#[^)]*)?\)")
_CODE_SPAN_RE = re.compile(r"`([^`\s]+\.md)`")
_BARE_RE = re.compile(r"(?<![\w/.:-])((?:[\w.-]+/)*[\w.-]+\.md)\b")
_SEE_RE = re.compile(r"\bsee\b", re.IGNORECASE)

KNOWN_KEYS = frozenset(
    {
        "name",
        "description",
        "summary",
        "context_cost",
        "load_when",
        "requires",
        "enhances",
        "kind",
        "tags",
    }
)


class DocumentParser:
    """
    Parser for marketplace documents.

    Responsibilities:
    - Extract and validate YAML frontmatter
    - Apply defaults for optional fields
    - Normalize requires/enhances entries to document ids
    - Record Tier-3 references mentioned in the body
    """

    def parse(
        self,
        raw_text: str,
        path: str | None = None,
        kind: DocumentKind | None = None,
    ) -> Document:
        """
        Parse raw document text.

        Args:
            raw_text: Full file content
            path: Source path, used for kind inference and reference resolution
            kind: Kind to use when the frontmatter declares none; inferred
                from the path when omitted

        Returns:
            Parsed Document

        Raises:
            MissingFieldError: If name or description is absent
            SummaryTooComplexError: If a summary line contains a code fence
            MalformedMetadataError: If the metadata block is invalid
        """
        text = raw_text.lstrip("\ufeff").replace("\r\n", "\n")
        frontmatter, body = self._split(text, path)

        name = self._required_str(frontmatter, "name", path)
        description = self._required_str(frontmatter, "description", path)
        if not _NAME_RE.match(name) or len(name) > 64:
            raise MalformedMetadataError(
                f"Invalid document name '{name}' in {path or '<text>'}. "
                "Name must be 1-64 characters: letters, digits, '.', '_' or '-'.",
                path,
            )

        doc_kind = self._resolve_kind(frontmatter.get("kind"), path, kind)

        return Document(
            id=make_document_id(doc_kind, name),
            kind=doc_kind,
            name=name,
            description=" ".join(description.split()),
            summary=self._parse_summary(frontmatter.get("summary"), path),
            context_cost=self._parse_cost(frontmatter.get("context_cost"), path),
            load_when=_dedupe(
                self._as_list(frontmatter.get("load_when"), "load_when", path),
                key=str.lower,
            ),
            requires=self._parse_refs(frontmatter.get("requires"), "requires", doc_kind, path),
            enhances=self._parse_refs(frontmatter.get("enhances"), "enhances", doc_kind, path),
            tags=_dedupe(
                [t.lower() for t in self._as_list(frontmatter.get("tags"), "tags", path)]
            ),
            body=body.strip(),
            extended_files=extract_extension_refs(body, path),
            path=_posix(path),
            metadata={k: v for k, v in frontmatter.items() if k not in KNOWN_KEYS},
        )

    def _split(self, text: str, path: str | None) -> tuple[dict[str, Any], str]:
        match = _FRONTMATTER_RE.match(text)
        if not match:
            raise MalformedMetadataError(
                f"Missing YAML frontmatter in {path or '<text>'}", path
            )

        try:
            frontmatter = yaml.safe_load(match.group(1))
        except yaml.YAMLError as e:
            raise MalformedMetadataError(
                f"Invalid YAML in {path or '<text>'}: {e}", path
            ) from e

        if frontmatter is None:
            frontmatter = {}
        if not isinstance(frontmatter, dict):
            raise MalformedMetadataError(
                f"Frontmatter must be a dictionary in {path or '<text>'}", path
            )
        return frontmatter, match.group(2)

    def _required_str(self, frontmatter: dict[str, Any], field: str, path: str | None) -> str:
        value = frontmatter.get(field)
        if value is None:
            raise MissingFieldError(field, path)
        if not isinstance(value, str):
            raise MalformedMetadataError(
                f"Field '{field}' must be a string in {path or '<text>'}", path
            )
        value = value.strip()
        if not value:
            raise MissingFieldError(field, path)
        return value

    def _resolve_kind(
        self, declared: Any, path: str | None, fallback: DocumentKind | None
    ) -> DocumentKind:
        if declared is not None:
            try:
                return DocumentKind(str(declared).strip().lower())
            except ValueError as e:
                raise MalformedMetadataError(
                    f"Unknown kind '{declared}' in {path or '<text>'}", path
                ) from e
        return fallback or infer_kind(path)

    def _parse_summary(self, value: Any, path: str | None) -> tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            items = [_strip_bullet(line) for line in value.splitlines()]
        elif isinstance(value, (list, tuple)):
            items = []
            for item in value:
                if isinstance(item, (dict, list)):
                    raise MalformedMetadataError(
                        f"Summary items must be plain text in {path or '<text>'}", path
                    )
                items.append(str(item).strip())
        else:
            raise MalformedMetadataError(
                f"Field 'summary' must be a list or text in {path or '<text>'}", path
            )

        lines = []
        for item in items:
            if _FENCE_RE.search(item):
                raise SummaryTooComplexError(item, path)
            if item:
                lines.append(item)
        return tuple(lines)

    def _parse_cost(self, value: Any, path: str | None) -> ContextCost:
        if value is None:
            return ContextCost.MEDIUM
        try:
            return ContextCost(str(value).strip().lower())
        except ValueError as e:
            raise MalformedMetadataError(
                f"Invalid context_cost '{value}' in {path or '<text>'}; "
                "expected low, medium or high",
                path,
            ) from e

    def _parse_refs(
        self, value: Any, field: str, kind: DocumentKind, path: str | None
    ) -> tuple[str, ...]:
        ids = []
        for ref in self._as_list(value, field, path):
            if ":" in ref:
                prefix, _, ref_name = ref.partition(":")
                try:
                    ref_kind = DocumentKind(prefix.strip().lower())
                except ValueError as e:
                    raise MalformedMetadataError(
                        f"Unknown kind prefix in {field} entry '{ref}' in {path or '<text>'}",
                        path,
                    ) from e
                ids.append(make_document_id(ref_kind, ref_name.strip()))
            else:
                ids.append(make_document_id(kind, ref))
        return _dedupe(ids)

    def _as_list(self, value: Any, field: str, path: str | None) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            items = re.split(r"[,\n]", value)
        elif isinstance(value, (list, tuple, set)):
            items = []
            for item in value:
                if not isinstance(item, (str, int, float)):
                    raise MalformedMetadataError(
                        f"Field '{field}' must contain plain strings in {path or '<text>'}",
                        path,
                    )
                items.append(str(item))
        else:
            raise MalformedMetadataError(
                f"Field '{field}' must be a list or string in {path or '<text>'}", path
            )
        return [item.strip() for item in items if item.strip()]


def infer_kind(path: str | None) -> DocumentKind:
    """Infer the document kind from its location in the corpus."""
    if not path:
        return DocumentKind.SKILL
    parts = [part.lower() for part in PurePosixPath(_posix(path)).parts[:-1]]
    for part in reversed(parts):
        if part == "agents":
            return DocumentKind.AGENT
        if part == "commands":
            return DocumentKind.COMMAND
        if part == "skills":
            return DocumentKind.SKILL
    return DocumentKind.SKILL


def extract_extension_refs(body: str, path: str | None = None) -> tuple[ExtensionRef, ...]:
    """
    Collect references to other Markdown files from a document body.

    Lines inside fenced code blocks are ignored. A reference on a line that
    contains the word "see" is flagged as a see-also reference.
    """
    base_dir = posixpath.dirname(_posix(path)) if path else ""
    own_name = PurePosixPath(_posix(path)).name if path else None
    refs: dict[str, ExtensionRef] = {}
    in_fence = False

    for line in body.splitlines():
        if _FENCE_RE.match(line.lstrip()):
            in_fence = not in_fence
            continue
        if in_fence:
            continue

        targets = _LINK_RE.findall(line)
        rest = _LINK_RE.sub(" ", line)
        targets += _CODE_SPAN_RE.findall(rest)
        rest = _CODE_SPAN_RE.sub(" ", rest)
        targets += _BARE_RE.findall(rest)
        see_also = bool(_SEE_RE.search(line))

        for target in targets:
            if "://" in target or target.startswith("/"):
                continue
            resolved = posixpath.normpath(posixpath.join(base_dir, target))
            filename = PurePosixPath(resolved).name
            if filename == own_name or filename == "SKILL.md":
                continue
            existing = refs.get(resolved)
            if existing is not None:
                if see_also and not existing.see_also:
                    refs[resolved] = existing.model_copy(update={"see_also": True})
                continue
            refs[resolved] = ExtensionRef(
                name=PurePosixPath(resolved).stem,
                path=resolved,
                see_also=see_also,
            )

    return tuple(refs.values())


def _posix(path: str | None) -> str | None:
    if path is None:
        return None
    return str(path).replace("\\", "/")


def _strip_bullet(line: str) -> str:
    line = line.strip()
    if line[:2] in ("- ", "* ", "+ "):
        return line[2:].strip()
    return line


def _dedupe(items: list[str], key=None) -> tuple[str, ...]:
    seen = set()
    result = []
    for item in items:
        marker = key(item) if key else item
        if marker in seen:
            continue
        seen.add(marker)
        result.append(item)
    return tuple(result)


_default_parser = DocumentParser()


def parse_document(
    raw_text: str, path: str | None = None, kind: DocumentKind | None = None
) -> Document:
    """Parse a document with the default parser."""
    return _default_parser.parse(raw_text, path=path, kind=kind)
