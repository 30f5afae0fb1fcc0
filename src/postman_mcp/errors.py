"""Error taxonomy shared by the resource client, engines and tools.

Every tool invocation either returns a payload or raises exactly one of
these. Nothing here is retried.
"""

from __future__ import annotations


class PostmanMCPError(Exception):
    """Base class for all errors raised by postman-mcp."""

    kind = "Error"


class ValidationError(PostmanMCPError):
    """A required argument is missing or an argument is invalid."""

    kind = "ValidationError"


class CredentialError(PostmanMCPError):
    """No Postman API key is configured.

    Raised before any network request is attempted.
    """

    kind = "CredentialError"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "Postman API key is not configured. "
            "Call 'set_credential' or set POSTMAN_API_KEY."
        )


class NotFoundError(PostmanMCPError):
    """A remote resource or a cached run key does not exist."""

    kind = "NotFoundError"


class UpstreamError(PostmanMCPError):
    """The Postman API answered with an error status or was unreachable.

    Attributes:
        status_code: HTTP status returned upstream, or None for transport errors.
    """

    kind = "UpstreamError"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ExecutionError(PostmanMCPError):
    """The execution engine failed to run the collection at all.

    Failed assertions inside a completed run are data, not this error.

    Attributes:
        returncode: Engine process exit code, when there was a process.
        stderr: Tail of the engine's stderr, when captured.
    """

    kind = "ExecutionError"

    def __init__(
        self,
        message: str,
        returncode: int | None = None,
        stderr: str | None = None,
    ) -> None:
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)
