"""
Transport - Abstract interface for talking to a search node.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, Literal, Optional


ResponseType = Literal["json", "text"]


class Transport(ABC):
    """
    Abstract base class for HTTP transports.

    Resource handles only build paths and parameters; sending, decoding
    and mapping failures to ``docsearch.errors`` is the transport's job.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Open the underlying connection pool."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying connection pool."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the node is reachable and healthy."""
        ...

    @abstractmethod
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
        """
        Send one request.

        Args:
            method: HTTP verb
            path: Path below the node URL
            query_parameters: Encoded into the query string
            body_parameters: Mapping/list sent as JSON, ``str`` sent as-is
            additional_headers: Merged over the default headers
            abort_signal: Aborts the request with ``RequestAbortedError`` when set
            response_type: ``"json"`` to decode the body, ``"text"`` for the raw body
        """
        ...

    async def get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        *,
        abort_signal: Optional[asyncio.Event] = None,
        response_type: ResponseType = "json",
    ) -> Any:
        return await self.perform_request(
            "get",
            path,
            query_parameters=params,
            abort_signal=abort_signal,
            response_type=response_type,
        )

    async def post(
        self,
        path: str,
        body: Any,
        params: Optional[Dict[str, Any]] = None,
        *,
        abort_signal: Optional[asyncio.Event] = None,
    ) -> Any:
        return await self.perform_request(
            "post",
            path,
            query_parameters=params,
            body_parameters=body,
            abort_signal=abort_signal,
        )

    async def delete(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.perform_request("delete", path, query_parameters=params)
