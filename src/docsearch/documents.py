"""
Documents resource - CRUD, bulk import/export and search for one collection.
"""

import asyncio
import json
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
from urllib.parse import quote

import structlog

from docsearch.cache import RequestWithCache
from docsearch.errors import ImportError_, MissingDocumentError
from docsearch.models import (
    DeleteQuery,
    DeleteResponse,
    Document,
    ImportResponse,
    SearchParams,
    SearchResponse,
    import_response_adapter,
)
from docsearch.platform.config import Settings, settings as default_settings
from docsearch.transport.base import Transport

logger = structlog.get_logger()

COLLECTIONS_RESOURCEPATH = "/collections"
RESOURCEPATH = "/documents"

CREATE_MANY_DEPRECATION = (
    "create_many is deprecated and will be removed in a future version. "
    "Use import_ instead, which takes either a list of documents or a JSONL string of documents"
)


def parse_import_results(results_in_jsonl: str) -> List[ImportResponse]:
    """Parse a JSONL import response into outcomes, skipping blank lines."""
    return [
        import_response_adapter.validate_json(line)
        for line in results_in_jsonl.split("\n")
        if line.strip()
    ]


class Documents:
    """
    Handle on the documents of a single collection.

    The handle keeps no per-call state, so one instance can serve any number
    of concurrent calls.
    """

    def __init__(
        self,
        collection_name: str,
        transport: Transport,
        settings: Optional[Settings] = None,
        request_cache: Optional[RequestWithCache] = None,
    ):
        self.collection_name = collection_name
        self.transport = transport
        self.settings = settings or default_settings
        if request_cache is None:
            request_cache = RequestWithCache(max_size=self.settings.SEARCH_CACHE_MAX_SIZE)
        self.request_cache = request_cache

    # =========================================================================
    # SINGLE DOCUMENT
    # =========================================================================

    async def create(self, document: Document, options: Optional[Dict[str, Any]] = None) -> Document:
        if document is None:
            raise MissingDocumentError()
        return await self.transport.post(self._endpoint_path(), document, dict(options or {}))

    async def upsert(self, document: Document, options: Optional[Dict[str, Any]] = None) -> Document:
        return await self._post_with_action(document, options, "upsert")

    async def update(self, document: Document, options: Optional[Dict[str, Any]] = None) -> Document:
        return await self._post_with_action(document, options, "update")

    async def _post_with_action(
        self, document: Document, options: Optional[Dict[str, Any]], action: str
    ) -> Document:
        if document is None:
            raise MissingDocumentError()
        # action goes last so caller options cannot replace it
        params = {**(options or {}), "action": action}
        return await self.transport.post(self._endpoint_path(), document, params)

    async def delete(self, id_or_query: Union[str, DeleteQuery, Mapping[str, Any]]) -> Union[Document, DeleteResponse]:
        """
        Delete one document by id, or every document matching a filter.

        A ``str`` is treated as a document id and the deleted document is
        returned. A ``DeleteQuery`` (or a mapping with ``filter_by``) deletes
        in batch and only the number of deleted documents is returned.
        """
        if isinstance(id_or_query, str):
            return await self.delete_by_id(id_or_query)
        if isinstance(id_or_query, (DeleteQuery, Mapping)):
            return await self.delete_by_filter(id_or_query)
        raise TypeError(
            f"delete() expects a document id or a filter query, got {type(id_or_query).__name__}"
        )

    async def delete_by_id(self, document_id: str) -> Document:
        return await self.transport.delete(self._endpoint_path(quote(document_id, safe="")))

    async def delete_by_filter(self, query: Union[DeleteQuery, Mapping[str, Any]]) -> DeleteResponse:
        if not isinstance(query, DeleteQuery):
            query = DeleteQuery.model_validate(dict(query))
        response = await self.transport.delete(self._endpoint_path(), query.to_params())
        return DeleteResponse.model_validate(response)

    # =========================================================================
    # BULK EXCHANGE
    # =========================================================================

    async def create_many(
        self, documents: Sequence[Document], options: Optional[Dict[str, Any]] = None
    ) -> List[ImportResponse]:
        logger.warning("create_many_deprecated", message=CREATE_MANY_DEPRECATION)
        return await self.import_(documents, options)

    async def import_(
        self,
        documents: Union[str, Sequence[Document]],
        options: Optional[Dict[str, Any]] = None,
    ) -> Union[str, List[ImportResponse]]:
        """
        Import a batch of documents in one request.

        Args:
            documents: A JSONL string, or a sequence of document mappings
            options: Query parameters for the import endpoint (e.g. ``action``)

        Returns:
            The raw JSONL response when ``documents`` is a string, otherwise
            one outcome per document in submission order.

        Raises:
            ImportError_: A sequence was given and at least one document failed.
                ``import_results`` on the error holds every outcome.
        """
        if isinstance(documents, str):
            return await self._post_jsonl(documents, options)

        documents = list(documents)
        if not documents:
            return []

        documents_in_jsonl = "\n".join(json.dumps(document) for document in documents)
        results_in_jsonl = await self._post_jsonl(documents_in_jsonl, options)
        results = parse_import_results(results_in_jsonl)

        if len(results) != len(documents):
            logger.warning(
                "import_result_count_mismatch",
                collection=self.collection_name,
                submitted=len(documents),
                received=len(results),
            )

        failed_count = sum(1 for result in results if not result.success)
        if failed_count > 0:
            succeeded_count = len(results) - failed_count
            logger.warning(
                "documents_import_failed",
                collection=self.collection_name,
                succeeded=succeeded_count,
                failed=failed_count,
            )
            raise ImportError_(
                f"{succeeded_count} documents imported successfully, {failed_count} documents failed "
                "during import. Use `error.import_results` from the raised exception to get a "
                "detailed error reason for each document.",
                results,
            )

        logger.debug("documents_imported", collection=self.collection_name, count=len(results))
        return results

    async def _post_jsonl(self, body: str, options: Optional[Dict[str, Any]]) -> str:
        return await self.transport.perform_request(
            "post",
            self._endpoint_path("import"),
            query_parameters=dict(options or {}),
            body_parameters=body,
            additional_headers={"Content-Type": "text/plain"},
            response_type="text",
        )

    async def export(self, options: Optional[Dict[str, Any]] = None) -> str:
        """Return every document of the collection as a JSONL string."""
        return await self.transport.get(self._endpoint_path("export"), dict(options or {}), response_type="text")

    # =========================================================================
    # SEARCH
    # =========================================================================

    async def search(
        self,
        search_parameters: Union[SearchParams, Mapping[str, Any]],
        cache_search_results_for_seconds: Optional[int] = None,
        abort_signal: Optional[asyncio.Event] = None,
    ) -> SearchResponse:
        """
        Search the collection, possibly answering from the client-side cache.

        Args:
            search_parameters: ``SearchParams`` or a mapping validated into one
            cache_search_results_for_seconds: Cache lifetime for this call;
                ``None`` uses the configured default, ``0`` skips the cache
            abort_signal: ``asyncio.Event``; setting it aborts the call with
                ``RequestAbortedError``
        """
        if not isinstance(search_parameters, SearchParams):
            search_parameters = SearchParams.model_validate(dict(search_parameters))
        if cache_search_results_for_seconds is None:
            cache_search_results_for_seconds = self.settings.CACHE_SEARCH_RESULTS_FOR_SECONDS

        query_params = search_parameters.to_query_params()
        if self.settings.USE_SERVER_SIDE_SEARCH_CACHE is True:
            query_params["usecache"] = True

        response = await self.request_cache.perform(
            self.transport,
            self.transport.get,
            [self._endpoint_path("search"), query_params],
            {"abort_signal": abort_signal},
            cache_response_for_seconds=cache_search_results_for_seconds,
        )
        return SearchResponse.model_validate(response)

    def _endpoint_path(self, operation: Optional[str] = None) -> str:
        path = f"{COLLECTIONS_RESOURCEPATH}/{quote(self.collection_name, safe='')}{RESOURCEPATH}"
        if operation is None:
            return path
        return f"{path}/{operation}"
