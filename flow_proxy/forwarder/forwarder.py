import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import urlsplit

import httpx
from opentelemetry import trace

from flow_proxy.utils import redact_url, strict_json_loads
from flow_proxy.utils.exception_logging import format_exception_message
from flow_proxy.utils.traced_requests import traced_forward

from .errors import InvalidURL, MissingInput, Unconfigured, UpstreamUnreachable

tracer = trace.get_tracer(__name__)
logger = logging.getLogger("uvicorn.error")

NOT_SET = "Not set"

# Tells tunnelling hosts (ngrok) to skip their browser interstitial page
AUTOMATED_CLIENT_HEADER = ("ngrok-skip-browser-warning", "test")

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    AUTOMATED_CLIENT_HEADER[0]: AUTOMATED_CLIENT_HEADER[1],
}

QueryParams = Union[Mapping[str, Any], Sequence[Tuple[str, Any]]]


@dataclass
class ProxyConfig:
    base_url: Optional[str] = None


@dataclass
class ForwardResult:
    status: int
    body: Any
    headers: Mapping[str, str]


def validate_base_url(candidate: Any) -> str:
    """
    Check that ``candidate`` is an absolute URL (scheme and authority present).

    There is no reachability check and no scheme allow-list.
    Raises MissingInput for an absent/empty value and InvalidURL otherwise.
    """
    if not candidate:
        raise MissingInput()
    if not isinstance(candidate, str):
        raise InvalidURL()
    if any(ch.isspace() for ch in candidate):
        raise InvalidURL()
    try:
        parts = urlsplit(candidate)
        # Raises ValueError for an out-of-range or non-numeric port
        parts.port
    except ValueError as e:
        raise InvalidURL() from e
    if not parts.scheme or not parts.netloc or not parts.hostname:
        raise InvalidURL()
    return candidate


def _decode_body(response: httpx.Response) -> Any:
    """Return the upstream body as parsed JSON, or as text when it isn't JSON."""
    if not response.content:
        return response.text
    try:
        return strict_json_loads(response.content)
    except ValueError:
        return response.text


class Forwarder:
    """
    Relays requests to the configured upstream base URL.

    The configuration is read and replaced without any locking; a forward that
    races a configuration update may see either value.
    """

    def __init__(
        self,
        config: Optional[ProxyConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config if config is not None else ProxyConfig()
        self._transport = transport

    def set_base_url(self, candidate: Any) -> str:
        base_url = validate_base_url(candidate)
        self.config.base_url = base_url
        logger.info(f"[Config] Base URL set to {redact_url(base_url)}")
        return base_url

    def get_base_url(self) -> str:
        return self.config.base_url or NOT_SET

    def build_target_url(self, path: str) -> str:
        if not self.config.base_url:
            raise Unconfigured()
        # Literal concatenation, duplicate or missing slashes are kept as-is
        return f"{self.config.base_url}{path}"

    async def forward(
        self,
        method: str,
        path: str,
        body: Any = None,
        query: Optional[QueryParams] = None,
    ) -> ForwardResult:
        """
        Issue a single outbound request and return whatever the upstream answered.

        Upstream error statuses are results, not failures. Only a missing
        configuration (Unconfigured) or a transport-level failure
        (UpstreamUnreachable) raises.
        """
        target_url = self.build_target_url(path)

        request_kwargs = {}
        if body is not None:
            request_kwargs["json"] = body
        if query:
            request_kwargs["params"] = query

        with traced_forward(tracer, "forward_request", method, target_url) as span:
            try:
                async with httpx.AsyncClient(
                    transport=self._transport, follow_redirects=True
                ) as client:
                    response = await client.request(
                        method=method,
                        url=target_url,
                        headers=dict(DEFAULT_HEADERS),
                        **request_kwargs,
                    )
            except (httpx.RequestError, httpx.InvalidURL) as e:
                message = format_exception_message(e)
                span.set_attribute("proxy.error", message)
                raise UpstreamUnreachable(message) from e

            span.set_attribute("proxy.status_code", response.status_code)
            return ForwardResult(
                status=response.status_code,
                body=_decode_body(response),
                headers=response.headers,
            )
