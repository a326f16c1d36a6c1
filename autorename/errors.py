"""Exception types raised across the rename pipeline."""


class AutoRenameError(Exception):
    """Base class for all autorename errors."""


class NoCredentialError(AutoRenameError):
    """No API key is configured for the selected provider."""

    def __init__(self, provider_name: str) -> None:
        self.provider_name = provider_name
        super().__init__(f"No API key configured for {provider_name}.")


class ExtractionError(AutoRenameError):
    """File content could not be read or decoded."""


class ProviderError(AutoRenameError):
    """An analysis provider failed to produce values."""


class NoAPIKeyError(ProviderError):
    """A provider was constructed without an API key."""

    def __init__(self) -> None:
        super().__init__("No API key configured.")


class RequestFailedError(ProviderError):
    """The provider request failed at the HTTP or transport level."""

    def __init__(self, detail: str, status_code: int | None = None, body: str | None = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"API request failed: {detail}")

    @classmethod
    def from_status(cls, status_code: int, body: str) -> "RequestFailedError":
        """Build the error for a non-success HTTP status."""
        return cls(f"HTTP {status_code}: {body}", status_code=status_code, body=body)


class InvalidResponseError(ProviderError):
    """The provider reply did not contain a decodable JSON object."""

    def __init__(self, detail: str = "") -> None:
        message = "Could not parse API response."
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)


class MoveError(AutoRenameError):
    """Moving a file to its proposed name failed."""


class InvalidTransitionError(AutoRenameError):
    """A status change is not allowed by the item state machine."""


class BatchInProgressError(AutoRenameError):
    """Another pipeline pass is already running."""


class UnknownItemError(AutoRenameError):
    """No item with the given id exists in the batch."""
