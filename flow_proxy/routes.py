import logging
from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import parse_qsl

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from flow_proxy.forwarder import (
    ConfigError,
    ForwardError,
    ForwardResult,
    Forwarder,
)
from flow_proxy.models import BaseUrlState, BaseUrlUpdated, ErrorEnvelope, HealthStatus
from flow_proxy.utils import strict_json_loads
from flow_proxy.utils.exception_logging import (
    format_exception_message,
    log_exception_with_details,
)

router = APIRouter()

logger = logging.getLogger("uvicorn.error")

# Statuses whose responses must not carry a body
BODYLESS_STATUSES = {204, 304}

_forwarder = Forwarder()


def get_forwarder() -> Forwarder:
    """Process-wide forwarder; tests swap it through dependency_overrides."""
    return _forwarder


class InvalidBody(ValueError):
    pass


def _is_json(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip()
    return media_type == "application/json" or media_type.endswith("+json")


async def read_payload(request: Request) -> Any:
    """
    Parse the inbound body into a JSON value.

    Form-encoded bodies become a flat mapping. An empty body yields None.
    Any other content type is not parsed and yields an empty object.
    """
    raw = await request.body()
    if not raw.strip():
        return None
    content_type = request.headers.get("content-type", "").lower()
    try:
        if "application/x-www-form-urlencoded" in content_type:
            return dict(parse_qsl(raw.decode("utf-8"), keep_blank_values=True))
        if not _is_json(content_type):
            return {}
        return strict_json_loads(raw)
    except ValueError as e:
        raise InvalidBody(format_exception_message(e)) from e


def _error(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorEnvelope(error=error, details=details).as_content(),
    )


def _relay(result: ForwardResult) -> Response:
    if result.status in BODYLESS_STATUSES:
        return Response(status_code=result.status)
    return JSONResponse(content=result.body, status_code=result.status)


async def _proxy(
    forwarder: Forwarder,
    method: str,
    path: str,
    body: Any = None,
    query=None,
) -> Response:
    try:
        result = await forwarder.forward(method, path, body=body, query=query)
    except ForwardError as e:
        log_exception_with_details(logger, "Proxy error:", e)
        return _error(500, "Proxy request failed", format_exception_message(e))
    return _relay(result)


async def _proxy_with_body(request: Request, forwarder: Forwarder, path: str) -> Response:
    try:
        body = await read_payload(request)
    except InvalidBody as e:
        logger.warning(f"[Proxy] Rejected body for {path}: {e}")
        return _error(400, "Invalid request body")
    return await _proxy(forwarder, "POST", path, body=body)


@router.post("/config/base-url", response_model=BaseUrlUpdated)
async def set_base_url(request: Request, forwarder: Forwarder = Depends(get_forwarder)):
    try:
        payload = await read_payload(request)
    except InvalidBody:
        payload = None
    candidate = payload.get("baseUrl") if isinstance(payload, dict) else None

    try:
        base_url = forwarder.set_base_url(candidate)
    except ConfigError as e:
        logger.warning(f"[Config] Rejected base URL: {e}")
        return _error(400, str(e))

    return BaseUrlUpdated(message="Base URL updated successfully", baseUrl=base_url)


@router.get("/config/base-url", response_model=BaseUrlState)
async def get_base_url(forwarder: Forwarder = Depends(get_forwarder)):
    return BaseUrlState(baseUrl=forwarder.get_base_url())


@router.get("/webhook")
async def webhook_get(request: Request, forwarder: Forwarder = Depends(get_forwarder)):
    return await _proxy(
        forwarder, "GET", "/webhook", query=request.query_params.multi_items()
    )


@router.post("/webhook")
async def webhook_post(request: Request, forwarder: Forwarder = Depends(get_forwarder)):
    return await _proxy_with_body(request, forwarder, "/webhook")


@router.post("/flow")
async def flow_post(request: Request, forwarder: Forwarder = Depends(get_forwarder)):
    return await _proxy_with_body(request, forwarder, "/flow")


@router.get("/health", response_model=HealthStatus)
async def health(forwarder: Forwarder = Depends(get_forwarder)):
    timestamp = (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )
    return HealthStatus(status="OK", baseUrl=forwarder.get_base_url(), timestamp=timestamp)
