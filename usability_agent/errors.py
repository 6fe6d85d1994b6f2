"""Error types for the intake and collector layers. The scoring engine never raises."""


class UsabilityAgentError(Exception):
    """Base exception for usability agent errors."""


class InvalidURLError(UsabilityAgentError, ValueError):
    """The submitted URL cannot be normalized into an http(s) website address."""


class UnreachableSiteError(UsabilityAgentError):
    """The normalized URL did not answer and does not resolve."""
    def __init__(self, url: str, message: str):
        self.url = url
        self.message = message
        super().__init__(f"Unreachable '{url}': {message}")


class CollectorError(UsabilityAgentError):
    """An audit data provider failed; the bundle is assembled without its data."""
    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source}: {message}")
