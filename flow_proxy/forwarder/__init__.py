from .errors import (
    ConfigError,
    ForwardError,
    InvalidURL,
    MissingInput,
    Unconfigured,
    UpstreamUnreachable,
)
from .forwarder import (
    AUTOMATED_CLIENT_HEADER,
    DEFAULT_HEADERS,
    NOT_SET,
    ForwardResult,
    Forwarder,
    ProxyConfig,
    validate_base_url,
)

__all__ = [
    "AUTOMATED_CLIENT_HEADER",
    "DEFAULT_HEADERS",
    "NOT_SET",
    "ConfigError",
    "ForwardError",
    "ForwardResult",
    "Forwarder",
    "InvalidURL",
    "MissingInput",
    "ProxyConfig",
    "Unconfigured",
    "UpstreamUnreachable",
    "validate_base_url",
]
