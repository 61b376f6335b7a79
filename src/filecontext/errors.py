"""Error taxonomy shared by the sandbox, the reader and the HTTP layer."""


class FileContextError(Exception):
    """Base class for request-level failures.

    ``status_code`` is the HTTP status the boundary layer answers with.
    """

    status_code = 500


class InvalidRequest(FileContextError):
    """Missing/invalid query text, bad path syntax or unusable input."""

    status_code = 400


class SandboxViolation(FileContextError):
    """A path resolves outside the storage root."""

    status_code = 403


class NotFound(FileContextError):
    """A validated path does not exist."""

    status_code = 404


class ReadFailure(FileContextError):
    """An entry exists but its content could not be read."""

    status_code = 500


class BackendFailure(Exception):
    """A model backend answered with something unusable.

    Never leaves a backend adapter: it is converted into an in-band
    ``QueryResponse.error``.
    """
