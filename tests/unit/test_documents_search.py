"""
Unit tests for search dispatch through the client-side cache.
"""

import asyncio

import pytest

from docsearch.cache import RequestWithCache
from docsearch.documents import Documents
from docsearch.errors import RequestAbortedError
from docsearch.models import SearchParams, SearchResponse
from docsearch.platform.config import Settings

SEARCH_RESPONSE = {
    "facet_counts": [],
    "found": 1,
    "out_of": 3,
    "page": 1,
    "request_params": {"collection_name": "books", "per_page": 10, "q": "dune"},
    "search_time_ms": 1,
    "hits": [
        {
            "document": {"id": "1", "title": "Dune"},
            "highlights": [{"field": "title", "snippet": "<mark>Dune</mark>", "matched_tokens": ["Dune"]}],
            "text_match": 130916,
        }
    ],
}

GROUPED_RESPONSE = {
    "facet_counts": [],
    "found": 1,
    "out_of": 3,
    "page": 1,
    "request_params": {"collection_name": "books", "per_page": 10, "q": "*"},
    "search_time_ms": 0,
    "grouped_hits": [
        {"group_key": [1965], "hits": [{"document": {"id": "1", "title": "Dune"}, "text_match": 100}]}
    ],
}


@pytest.fixture
def search_transport(fake_transport):
    fake_transport.handler = lambda call: SEARCH_RESPONSE
    return fake_transport


@pytest.mark.asyncio
async def test_search_sends_query_params(documents, search_transport):
    result = await documents.search({"q": "dune", "query_by": "title", "per_page": 10})

    assert isinstance(result, SearchResponse)
    assert result.found == 1
    assert result.hits[0].document["title"] == "Dune"
    assert result.hits[0].highlights[0].field == "title"
    assert result.is_grouped is False

    call = search_transport.calls[0]
    assert call.method == "get"
    assert call.path == "/collections/books/documents/search"
    assert call.query_parameters == {"q": "dune", "query_by": "title", "per_page": 10}


@pytest.mark.asyncio
async def test_search_forwards_unknown_params(documents, search_transport):
    params = SearchParams(q="dune", query_by="title", extra_params={"vector_query": "embedding:([], k: 5)"})

    await documents.search(params)
    await documents.search({"q": "dune", "query_by": "title", "prioritize_exact_match": False})

    assert search_transport.calls[0].query_parameters["vector_query"] == "embedding:([], k: 5)"
    assert search_transport.calls[1].query_parameters["prioritize_exact_match"] is False


@pytest.mark.asyncio
async def test_search_grouped_response(documents, fake_transport):
    fake_transport.handler = lambda call: GROUPED_RESPONSE

    result = await documents.search({"q": "*", "query_by": "title", "group_by": "year"})

    assert result.is_grouped is True
    assert result.hits is None
    assert result.grouped_hits[0].group_key == [1965]


@pytest.mark.asyncio
async def test_server_side_cache_flag_adds_usecache(fake_transport):
    fake_transport.handler = lambda call: SEARCH_RESPONSE
    settings = Settings(SEARCH_API_KEY="k", USE_SERVER_SIDE_SEARCH_CACHE=True, _env_file=None)
    documents = Documents("books", fake_transport, settings=settings)

    await documents.search({"q": "dune", "query_by": "title"})

    assert fake_transport.calls[0].query_parameters["usecache"] is True


@pytest.mark.asyncio
async def test_identical_searches_within_lifetime_hit_cache(documents, search_transport):
    params = {"q": "dune", "query_by": "title"}

    first = await documents.search(params, cache_search_results_for_seconds=60)
    second = await documents.search(params, cache_search_results_for_seconds=60)

    assert len(search_transport.calls) == 1
    assert first == second
    assert first.model_dump() == second.model_dump()


@pytest.mark.asyncio
async def test_zero_lifetime_always_hits_network(documents, search_transport):
    params = {"q": "dune", "query_by": "title"}

    await documents.search(params, cache_search_results_for_seconds=0)
    await documents.search(params, cache_search_results_for_seconds=0)

    assert len(search_transport.calls) == 2
    assert len(documents.request_cache) == 0


@pytest.mark.asyncio
async def test_default_lifetime_comes_from_settings(fake_transport):
    fake_transport.handler = lambda call: SEARCH_RESPONSE
    settings = Settings(SEARCH_API_KEY="k", CACHE_SEARCH_RESULTS_FOR_SECONDS=120, _env_file=None)
    documents = Documents("books", fake_transport, settings=settings)

    await documents.search({"q": "dune", "query_by": "title"})
    await documents.search({"q": "dune", "query_by": "title"})

    assert len(fake_transport.calls) == 1


@pytest.mark.asyncio
async def test_usecache_marker_is_part_of_cache_identity(fake_transport):
    fake_transport.handler = lambda call: SEARCH_RESPONSE
    shared_cache = RequestWithCache()
    plain = Documents(
        "books", fake_transport,
        settings=Settings(SEARCH_API_KEY="k", _env_file=None),
        request_cache=shared_cache,
    )
    server_cached = Documents(
        "books", fake_transport,
        settings=Settings(SEARCH_API_KEY="k", USE_SERVER_SIDE_SEARCH_CACHE=True, _env_file=None),
        request_cache=shared_cache,
    )
    params = {"q": "dune", "query_by": "title"}

    await plain.search(params, cache_search_results_for_seconds=60)
    await server_cached.search(params, cache_search_results_for_seconds=60)

    assert len(fake_transport.calls) == 2
    assert len(shared_cache) == 2


@pytest.mark.asyncio
async def test_abort_before_dispatch_raises(documents, search_transport):
    params = {"q": "dune", "query_by": "title"}
    await documents.search(params, cache_search_results_for_seconds=60)

    signal = asyncio.Event()
    signal.set()
    with pytest.raises(RequestAbortedError):
        await documents.search(params, cache_search_results_for_seconds=60, abort_signal=signal)

    assert len(search_transport.calls) == 1


@pytest.mark.asyncio
async def test_abort_signal_is_passed_to_transport(documents, search_transport):
    signal = asyncio.Event()

    await documents.search({"q": "dune", "query_by": "title"}, abort_signal=signal)

    assert search_transport.calls[0].abort_signal is signal


def test_injected_empty_cache_is_used(fake_transport, settings):
    cache = RequestWithCache()

    documents = Documents("books", fake_transport, settings=settings, request_cache=cache)

    assert len(cache) == 0
    assert documents.request_cache is cache
