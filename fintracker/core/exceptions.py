class FetchError(Exception):
    def __init__(self, detail: str = "Fetch failed") -> None:
        super().__init__(detail)
        self.detail = detail


class InvalidIdentifierError(FetchError):
    def __init__(self, detail: str = "Invalid stock symbol provided"):
        super().__init__(detail)


class ConfigurationUnavailableError(FetchError):
    def __init__(
        self,
        detail: str = "API configuration not available and synthetic data not allowed",
    ):
        super().__init__(detail)


class RemoteFailureError(FetchError):
    def __init__(self, reason: str, detail: str | None = None):
        super().__init__(detail or f"Remote source failed: {reason}")
        self.reason = reason


class SyntheticGenerationError(FetchError):
    def __init__(self, detail: str = "Synthetic data generator returned no usable payload"):
        super().__init__(detail)


class SourceError(Exception):
    """Transport or HTTP failure raised by a concrete remote source."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class QuoteSourceError(SourceError):
    pass


class ConversionError(FetchError):
    def __init__(self, detail: str = "Currency conversion failed"):
        super().__init__(detail)
