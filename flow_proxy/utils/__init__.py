import json
import math
from typing import Any, Optional, Union
from urllib.parse import urlsplit, urlunsplit


def redact_url(url: Optional[str]) -> str:
    """Drop userinfo from a URL so it can be logged or traced."""
    if not url:
        return "<empty>"
    parts = urlsplit(url)
    if parts.username is None and parts.password is None:
        return url
    host = parts.hostname or ""
    if parts.port is not None:
        host = f"{host}:{parts.port}"
    return urlunsplit((parts.scheme, f"***@{host}", parts.path, parts.query, parts.fragment))


def _reject_constant(name: str):
    raise ValueError(f"Non-finite number {name} is not valid JSON")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"Number {text} is out of range for JSON")
    return value


def strict_json_loads(data: Union[str, bytes]) -> Any:
    """json.loads that refuses NaN, Infinity and floats that overflow to inf."""
    return json.loads(data, parse_constant=_reject_constant, parse_float=_finite_float)
