"""Exception hierarchy for the blogcrm pipeline."""

from __future__ import annotations


class BlogCRMError(Exception):
    """Base class for every error raised by blogcrm."""


class ApiError(BlogCRMError):
    """A GitHub API call failed (after retries, where retries apply)."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        url: str | None = None,
        retryable: bool = False,
    ) -> None:
        self.status = status
        self.url = url
        self.retryable = retryable
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        if self.status is not None:
            return f"{base} (HTTP {self.status})"
        return base


class FetchError(BlogCRMError):
    """Raw content could not be retrieved from the raw-content host."""

    def __init__(
        self, message: str, *, status: int | None = None, url: str | None = None
    ) -> None:
        self.status = status
        self.url = url
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        if self.status is not None:
            return f"{base} (HTTP {self.status})"
        return base


class ParseError(BlogCRMError):
    """Frontmatter or markdown could not be parsed."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        self.path = path
        prefix = f"{path}: " if path else ""
        super().__init__(f"{prefix}{message}")


class ValidationError(BlogCRMError):
    """A metadata field has a value of an unsupported shape."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class PipelineError(BlogCRMError):
    """The pipeline run could not start (e.g. the file listing failed)."""


__all__ = [
    "ApiError",
    "BlogCRMError",
    "FetchError",
    "ParseError",
    "PipelineError",
    "ValidationError",
]
