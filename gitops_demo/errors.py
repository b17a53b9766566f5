"""Error kinds raised by the service and their HTTP status codes."""


class GitOpsError(Exception):
  """Base class for errors that map to a structured JSON response."""

  def __init__(self, message: str):
    super().__init__(message)
    self.message = message


class ValidationError(GitOpsError):
  """Missing or malformed request input."""


class BackendError(GitOpsError):
  """The relational backend could not be reached or queried."""


class RequestTimeoutError(GitOpsError):
  """A request ran past the configured timeout."""


ERROR_STATUS_CODES: dict[type[Exception], int] = {
  ValidationError: 400,
  BackendError: 500,
  RequestTimeoutError: 504,
}


def status_code_for(exc: Exception) -> int:
  """Look up the HTTP status for an error, walking its class hierarchy."""
  for cls in type(exc).__mro__:
    if cls in ERROR_STATUS_CODES:
      return ERROR_STATUS_CODES[cls]
  return 500
