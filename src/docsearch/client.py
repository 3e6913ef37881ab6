from typing import Dict, Optional

import structlog

from docsearch.cache import RequestWithCache
from docsearch.documents import Documents
from docsearch.platform.config import Settings, settings as default_settings
from docsearch.transport.base import Transport
from docsearch.transport.httpx_transport import HttpxTransport

logger = structlog.get_logger()


class SearchClient:
    """
    Entry point of the client.

    Owns the transport and the search cache, and hands out one ``Documents``
    handle per collection. All handles share the same cache.
    """

    def __init__(self, settings: Optional[Settings] = None, transport: Optional[Transport] = None):
        self.settings = settings or default_settings
        self.transport = transport or HttpxTransport(self.settings)
        self.request_cache = RequestWithCache(max_size=self.settings.SEARCH_CACHE_MAX_SIZE)
        self._documents: Dict[str, Documents] = {}

    def documents(self, collection_name: str) -> Documents:
        if collection_name not in self._documents:
            self._documents[collection_name] = Documents(
                collection_name,
                self.transport,
                settings=self.settings,
                request_cache=self.request_cache,
            )
        return self._documents[collection_name]

    async def connect(self) -> None:
        await self.transport.connect()
        logger.info("search_client_connected", node=self.settings.node_url)

    async def close(self) -> None:
        await self.transport.close()
        self.request_cache.clear()

    async def __aenter__(self) -> "SearchClient":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def health_check(self) -> bool:
        return await self.transport.health_check()
