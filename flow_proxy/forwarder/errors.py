class ConfigError(ValueError):
    """A candidate base URL was rejected."""


class MissingInput(ConfigError):
    def __init__(self, message: str = "Base URL is required"):
        super().__init__(message)


class InvalidURL(ConfigError):
    def __init__(self, message: str = "Invalid URL format"):
        super().__init__(message)


class ForwardError(Exception):
    """A forward produced no upstream response."""


class Unconfigured(ForwardError):
    def __init__(self, message: str = "Base URL not set. Please set the base URL first."):
        super().__init__(message)


class UpstreamUnreachable(ForwardError):
    """The outbound call failed below HTTP, so there is no status to relay."""
