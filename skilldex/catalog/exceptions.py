"""
Catalog-related exceptions.

Parse errors are local to one document and are collected during a corpus
scan. Validation errors are global to a Registry and abort its construction.
Resolution errors signal a broken Registry invariant and should never reach
a user.
"""


class CatalogError(Exception):
    """Base exception for all catalog errors."""

    pass


class DocumentParseError(CatalogError):
    """Raised when a document cannot be parsed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class MissingFieldError(DocumentParseError):
    """Raised when a required metadata field is absent or blank."""

    def __init__(self, field: str, path: str | None = None) -> None:
        super().__init__(f"Missing '{field}' field in {path or '<text>'}", path)
        self.field = field


class SummaryTooComplexError(DocumentParseError):
    """Raised when a summary line carries a code fence."""

    def __init__(self, line: str, path: str | None = None) -> None:
        super().__init__(
            f"Summary in {path or '<text>'} must not contain code blocks: {line!r}",
            path,
        )
        self.line = line


class MalformedMetadataError(DocumentParseError):
    """Raised when the metadata block is absent, invalid YAML, or mistyped."""

    pass


class RegistryValidationError(CatalogError):
    """Raised when a document set violates a Registry invariant."""

    def __init__(self, message: str, document_ids: list[str]) -> None:
        super().__init__(message)
        self.document_ids = document_ids


class DuplicateNameError(RegistryValidationError):
    """Raised when two documents share a name within the same kind."""

    pass


class DanglingReferenceError(RegistryValidationError):
    """Raised when requires/enhances points at an unknown document."""

    pass


class CyclicRequiresError(RegistryValidationError):
    """Raised when the requires graph contains a cycle."""

    pass


class ResolutionError(CatalogError):
    """Raised when dependency resolution hits a broken invariant."""

    pass


class DependencyCycleError(ResolutionError):
    """Raised when a requires cycle is found at resolution time."""

    def __init__(self, cycle: list[str]) -> None:
        super().__init__(f"Dependency cycle detected: {' -> '.join(cycle)}")
        self.cycle = cycle


class DocumentNotFoundError(CatalogError):
    """Raised when a document id is not in the Registry."""

    def __init__(self, document_id: str) -> None:
        super().__init__(f"Document '{document_id}' not found")
        self.document_id = document_id


class ScanTimeoutError(CatalogError):
    """Raised when a corpus scan exceeds its deadline."""

    pass


class CatalogNotReadyError(CatalogError):
    """Raised when the catalog is queried before initialization."""

    pass
