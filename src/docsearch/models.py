"""
Request and response schemas for the documents API.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator


Document = Dict[str, Any]


# =========================================================================
# COLLECTION SCHEMA
# =========================================================================

class FieldType(str, Enum):
    STRING = "string"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT = "float"
    BOOL = "bool"
    STRING_ARRAY = "string[]"
    INT32_ARRAY = "int32[]"
    INT64_ARRAY = "int64[]"
    FLOAT_ARRAY = "float[]"
    BOOL_ARRAY = "bool[]"
    AUTO = "auto"
    STRING_AUTO = "string*"


class CollectionFieldSchema(BaseModel):
    name: str
    type: FieldType
    optional: Optional[bool] = None
    facet: Optional[bool] = None
    index: Optional[bool] = None


class CollectionCreateSchema(BaseModel):
    name: str
    # the server rejects creation without it when sorting on a numeric field
    default_sorting_field: Optional[str] = None
    fields: List[CollectionFieldSchema]


class CollectionSchema(CollectionCreateSchema):
    created_at: int
    num_documents: int
    num_memory_shards: int


# =========================================================================
# DELETE
# =========================================================================

class DeleteQuery(BaseModel):
    """Filter-driven batch delete."""

    filter_by: str = Field(..., min_length=1)
    batch_size: Optional[int] = Field(default=None, gt=0)

    def to_params(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class DeleteResponse(BaseModel):
    num_deleted: int


# =========================================================================
# IMPORT
# =========================================================================

class ImportSuccess(BaseModel):
    success: Literal[True] = True

    # the server may echo `id` or `document` depending on import options
    model_config = ConfigDict(extra="allow")


class ImportFailure(BaseModel):
    success: Literal[False] = False
    error: Optional[str] = None
    code: Optional[int] = None
    # echoed either as an object or as the raw JSONL line that was rejected
    document: Union[Document, str, None] = None

    model_config = ConfigDict(extra="allow")


ImportResponse = Union[ImportSuccess, ImportFailure]

import_response_adapter: TypeAdapter[ImportResponse] = TypeAdapter(ImportResponse)


# =========================================================================
# SEARCH
# =========================================================================

class SearchParams(BaseModel):
    """
    Search parameters understood by the server.

    Parameters this model does not know about are kept in ``extra_params``
    and forwarded verbatim, so newer server options can be used without a
    client release. Unknown keys passed at validation time are moved there
    automatically.
    """

    q: str
    query_by: str
    query_by_weights: Optional[str] = None
    prefix: Optional[bool] = None
    filter_by: Optional[str] = None
    sort_by: Optional[str] = None
    facet_by: Optional[str] = None
    max_facet_values: Optional[int] = None
    facet_query: Optional[str] = None
    num_typos: Optional[Literal[0, 1, 2]] = None
    page: Optional[int] = None
    per_page: Optional[int] = None
    group_by: Optional[str] = None
    group_limit: Optional[int] = None
    include_fields: Optional[str] = None
    exclude_fields: Optional[str] = None
    highlight_full_fields: Optional[str] = None
    highlight_affix_num_tokens: Optional[int] = None
    highlight_start_tag: Optional[str] = None
    highlight_end_tag: Optional[str] = None
    snippet_threshold: Optional[int] = None
    drop_tokens_threshold: Optional[int] = None
    typo_tokens_threshold: Optional[int] = None
    pinned_hits: Optional[str] = None
    hidden_hits: Optional[str] = None
    limit_hits: Optional[int] = None

    extra_params: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _collect_extra_params(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        known = set(cls.model_fields)
        unknown = {k: v for k, v in data.items() if k not in known}
        if not unknown:
            return data
        values = {k: v for k, v in data.items() if k in known}
        values["extra_params"] = {**unknown, **values.get("extra_params", {})}
        return values

    def to_query_params(self) -> Dict[str, Any]:
        """Flatten into outgoing query parameters, escape hatch merged last."""
        params = self.model_dump(exclude_none=True, exclude={"extra_params"})
        params.update(self.extra_params)
        return params


class SearchHighlight(BaseModel):
    field: str
    snippet: Optional[str] = None
    matched_tokens: List[Any] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")


class SearchResponseHit(BaseModel):
    document: Document
    highlights: List[SearchHighlight] = Field(default_factory=list)
    text_match: Optional[int] = None

    model_config = ConfigDict(extra="allow")


class SearchGroupedHits(BaseModel):
    group_key: List[Any]
    hits: List[SearchResponseHit]


class SearchResponse(BaseModel):
    """Search results; ``hits`` and ``grouped_hits`` are mutually exclusive."""

    facet_counts: List[Dict[str, Any]] = Field(default_factory=list)
    found: int
    out_of: int = 0
    page: int
    request_params: Dict[str, Any] = Field(default_factory=dict)
    search_time_ms: int = 0
    hits: Optional[List[SearchResponseHit]] = None
    grouped_hits: Optional[List[SearchGroupedHits]] = None

    model_config = ConfigDict(extra="allow")

    @property
    def is_grouped(self) -> bool:
        return self.grouped_hits is not None
