"""Exceptions raised by the Autotask client and tool dispatch layer."""


class AutotaskError(Exception):
    """Base exception for Autotask errors."""


class AutotaskConfigurationError(AutotaskError):
    """Raised when credentials or endpoints are missing or invalid."""

    def __init__(self, missing: list[str] | None = None):
        if missing:
            super().__init__(
                f"Missing Autotask configuration: {', '.join(sorted(missing))}"
            )
        else:
            super().__init__("Autotask configuration error")
        self.missing = missing or []


class AutotaskAPIError(AutotaskError):
    """Raised when the Autotask REST API answers with a non-success status."""

    def __init__(self, status: int, message: str = "", url: str | None = None):
        detail = f"Autotask API returned HTTP {status}"
        if url:
            detail = f"{detail} for {url}"
        if message:
            detail = f"{detail}: {message}"
        super().__init__(detail)
        self.status = status
        self.url = url


class UnsupportedOperationError(AutotaskAPIError):
    """Raised on HTTP 405, when an instance does not expose an endpoint."""

    def __init__(self, message: str = "", url: str | None = None):
        super().__init__(405, message or "Method Not Allowed", url)


class AutotaskNotFoundError(AutotaskAPIError):
    """Raised on HTTP 404."""

    def __init__(self, message: str = "", url: str | None = None):
        super().__init__(404, message or "Not Found", url)


class AutotaskRateLimitError(AutotaskAPIError):
    """Raised when HTTP 429 persists after all retries."""

    def __init__(self, message: str = "", url: str | None = None):
        super().__init__(429, message or "Rate limit exhausted", url)


class AutotaskNetworkError(AutotaskError):
    """Raised when a request fails at the transport level or returns bad JSON."""


class UnknownToolError(AutotaskError, ValueError):
    """Raised when a tool name is not in the catalog."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class InvalidToolArgumentsError(AutotaskError, ValueError):
    """Raised when a tool call omits required arguments."""

    def __init__(self, name: str, missing: list[str]):
        super().__init__(
            f"Missing required arguments for {name}: {', '.join(missing)}"
        )
        self.name = name
        self.missing = missing
