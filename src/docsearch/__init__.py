"""
docsearch - asyncio client for the documents API of a search engine.

- documents: per-collection resource (CRUD, JSONL import/export, search)
- cache: client-side search response cache
- transport: HTTP transports (httpx)
- platform: configuration and logging
"""

from .client import SearchClient
from .documents import Documents
from .errors import ImportError_, RequestAbortedError, SearchClientError

__version__ = "0.1.0"

__all__ = ["SearchClient", "Documents", "ImportError_", "RequestAbortedError", "SearchClientError"]
