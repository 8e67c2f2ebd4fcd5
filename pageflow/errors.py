"""Exception hierarchy for the page workflow engine.

User-correctable problems derive from :class:`ValidationError`; the file
parser's failures are a subtree of it so callers can render them inline.
:class:`VersionConflict` is transient and tells the caller to re-read and
retry. :class:`EnrichmentFailure` only ever travels inside the background
worker pool.
"""

from __future__ import annotations

from typing import Optional


class PageflowError(Exception):
    """Base class for every error raised by the engine."""


class ValidationError(PageflowError):
    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class ParseError(ValidationError):
    """Uploaded content file could not be turned into a content record."""

    def __init__(self, message: str) -> None:
        super().__init__(message, field="file")


class UnsupportedFormat(ParseError):
    pass


class FileTooLarge(ParseError):
    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            f"File is {size} bytes; uploads must be at most {limit} bytes "
            f"({limit // (1024 * 1024)} MB)."
        )
        self.size = size
        self.limit = limit


class MissingDataRow(ParseError):
    pass


class InvalidTransition(ValidationError):
    def __init__(self, current: str, action: str) -> None:
        super().__init__(
            f"Cannot {action} a page in status '{current}'; "
            "review actions are only available while the page is pending review.",
            field="status",
        )
        self.current = current
        self.action = action


class NotAuthenticated(PageflowError):
    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class PageNotFound(PageflowError):
    def __init__(self, page_id) -> None:
        super().__init__(f"Page {page_id} not found")
        self.page_id = page_id


class ArtifactNotFound(PageflowError):
    def __init__(self, kind: str, artifact_id) -> None:
        super().__init__(f"{kind} artifact {artifact_id} not found")
        self.kind = kind
        self.artifact_id = artifact_id


class VersionConflict(PageflowError):
    """Another writer claimed the same version first; re-read and retry."""

    def __init__(self, page_id, kind: str, version: int) -> None:
        super().__init__(
            f"Version {version} of {kind} data for page {page_id} was written "
            "concurrently; reload the latest version and retry."
        )
        self.page_id = page_id
        self.kind = kind
        self.version = version


class KeywordProviderError(PageflowError):
    """The external keyword-metrics provider failed or returned garbage."""


class EnrichmentFailure(PageflowError):
    def __init__(self, seo_artifact_id, reason: str) -> None:
        super().__init__(f"Keyword enrichment failed for SEO artifact {seo_artifact_id}: {reason}")
        self.seo_artifact_id = seo_artifact_id
        self.reason = reason
