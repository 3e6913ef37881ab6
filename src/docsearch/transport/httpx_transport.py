import asyncio
import contextlib
from typing import Any, Dict, Optional

import httpx
import structlog

from docsearch.errors import MissingConfigurationError, RequestAbortedError, error_for_status
from docsearch.platform.config import Settings, settings as default_settings
from docsearch.transport.base import ResponseType, Transport

logger = structlog.get_logger()

API_KEY_HEADER = "X-TYPESENSE-API-KEY"


class HttpxTransport(Transport):
    """Single-node transport using httpx for async."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = settings or default_settings
        if not settings.SEARCH_HOST:
            raise MissingConfigurationError("Missing search node host (SEARCH_HOST)")
        if not settings.SEARCH_API_KEY:
            raise MissingConfigurationError("Missing API key (SEARCH_API_KEY)")

        self._url = settings.node_url
        self._api_key = settings.SEARCH_API_KEY
        self._timeout = settings.CONNECTION_TIMEOUT_SECONDS
        self._http_transport = http_transport
        self.client: Optional[httpx.AsyncClient] = None

    async def connect(self) -> None:
        if not self.client:
            self.client = httpx.AsyncClient(
                base_url=self._url,
                headers={API_KEY_HEADER: self._api_key, "Content-Type": "application/json"},
                timeout=self._timeout,
                transport=self._http_transport,
            )

    async def close(self) -> None:
        if self.client:
            await self.client.aclose()
            self.client = None

    async def __aenter__(self) -> "HttpxTransport":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _ensure_connected(self):
        if not self.client:
            await self.connect()

    async def health_check(self) -> bool:
        await self._ensure_connected()
        try:
            resp = await self.client.get("/health")
            return resp.status_code == 200 and resp.json().get("ok") is True
        except Exception as e:
            logger.error("search_health_check_failed", error=str(e))
            return False

    async def perform_request(
        self,
        method: str,
        path: str,
        *,
        query_parameters: Optional[Dict[str, Any]] = None,
        body_parameters: Any = None,
        additional_headers: Optional[Dict[str, str]] = None,
        abort_signal: Optional[asyncio.Event] = None,
        response_type: ResponseType = "json",
    ) -> Any:
        await self._ensure_connected()
        if abort_signal is not None and abort_signal.is_set():
            raise RequestAbortedError()

        request_kwargs: Dict[str, Any] = {
            "params": {k: v for k, v in (query_parameters or {}).items() if v is not None},
            "headers": additional_headers or {},
        }
        if isinstance(body_parameters, (str, bytes)):
            request_kwargs["content"] = body_parameters
        elif body_parameters is not None:
            request_kwargs["json"] = body_parameters

        request = self.client.request(method.upper(), path, **request_kwargs)
        if abort_signal is None:
            resp = await request
        else:
            resp = await self._send_abortable(request, abort_signal)

        logger.debug("search_request", method=method.upper(), path=path, status=resp.status_code)

        if not resp.is_success:
            raise error_for_status(resp.status_code, self._error_message(resp))

        if response_type == "text":
            return resp.text
        return resp.json() if resp.content else None

    async def _send_abortable(self, request, abort_signal: asyncio.Event) -> httpx.Response:
        request_task = asyncio.ensure_future(request)
        abort_task = asyncio.ensure_future(abort_signal.wait())
        try:
            await asyncio.wait({request_task, abort_task}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            request_task.cancel()
            abort_task.cancel()
            raise

        if request_task.done():
            abort_task.cancel()
            return request_task.result()

        request_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await request_task
        logger.info("search_request_aborted")
        raise RequestAbortedError()

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        try:
            body = resp.json()
        except ValueError:
            return resp.text
        if isinstance(body, dict) and "message" in body:
            return str(body["message"])
        return resp.text
