"""
Client-side response cache for read requests.
"""

import copy
import json
import time
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence, Tuple

import structlog

from docsearch.errors import RequestAbortedError

logger = structlog.get_logger()

DEFAULT_MAX_SIZE = 100


class RequestWithCache:
    """
    Caches responses of transport calls by request identity.

    Two calls share an entry when they go through the same transport and
    request function with the same effective arguments. The abort signal is
    not part of the identity.
    """

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE, clock: Callable[[], float] = time.monotonic):
        self.max_size = max_size
        self._clock = clock
        self._responses: "OrderedDict[str, Tuple[float, Any]]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._responses)

    def clear(self) -> None:
        self._responses.clear()

    async def perform(
        self,
        request_context: Any,
        request_function: Callable[..., Awaitable[Any]],
        request_args: Sequence[Any] = (),
        request_kwargs: Optional[Dict[str, Any]] = None,
        *,
        cache_response_for_seconds: Optional[float] = 120,
    ) -> Any:
        """
        Run ``request_function`` or serve its cached response.

        A falsy or negative ``cache_response_for_seconds`` bypasses the cache
        for this call, both for reading and for storing.
        """
        request_kwargs = dict(request_kwargs or {})
        abort_signal = request_kwargs.get("abort_signal")
        if abort_signal is not None and abort_signal.is_set():
            raise RequestAbortedError()

        if not cache_response_for_seconds or cache_response_for_seconds <= 0:
            return await request_function(*request_args, **request_kwargs)

        key = self._cache_key(request_context, request_function, request_args, request_kwargs)
        cached = self._responses.get(key)
        if cached is not None:
            stored_at, response = cached
            if self._clock() - stored_at < cache_response_for_seconds:
                self._responses.move_to_end(key)
                logger.debug("request_cache_hit", function=request_function.__name__)
                return copy.deepcopy(response)
            del self._responses[key]

        response = await request_function(*request_args, **request_kwargs)

        self._responses[key] = (self._clock(), copy.deepcopy(response))
        self._responses.move_to_end(key)
        while len(self._responses) > self.max_size:
            self._responses.popitem(last=False)
        return response

    @staticmethod
    def _cache_key(
        request_context: Any,
        request_function: Callable[..., Any],
        request_args: Sequence[Any],
        request_kwargs: Dict[str, Any],
    ) -> str:
        identity_kwargs = {k: v for k, v in request_kwargs.items() if k != "abort_signal"}
        return json.dumps(
            [id(request_context), request_function.__name__, list(request_args), identity_kwargs],
            sort_keys=True,
            default=str,
        )
