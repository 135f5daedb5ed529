"""Engine error types."""


class PatchMergeError(Exception):
    """Base class for errors raised by the resolution engine."""


class ProviderUnavailable(PatchMergeError):
    """A provider could not be reached or answered with an error status."""

    def __init__(
        self,
        provider: str,
        detail: str,
        status: int | None = None,
    ):
        self.provider = provider
        self.detail = detail
        self.status = status
        if status is None:
            message = f"Provider '{provider}' unavailable: {detail}"
        else:
            message = (
                f"Provider '{provider}' returned HTTP {status}: {detail}"
            )
        super().__init__(message)


class MalformedProviderResponse(PatchMergeError):
    """A provider reply could not be read as a resolution."""
