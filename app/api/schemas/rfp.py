"""RFP search schemas (TED notices normalized to a stable shape).

Wire format is camelCase (referenceNumber, publicationDate, ...); models accept
either the alias or the Python field name.
"""
import re
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_COMPACT_DATE_RE = re.compile(r"^\d{8}$")


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DocumentLink(_CamelModel):
    """Downloadable document attached to a notice."""

    url: str = Field(..., min_length=1)
    title: str
    type: Optional[str] = None

    @field_validator("url")
    @classmethod
    def url_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("url must not be blank")
        return v


class RFPNotice(_CamelModel):
    """One normalized procurement notice. id, title and publication_date are always present."""

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    reference_number: Optional[str] = None
    publication_date: str = Field(..., min_length=1)
    deadline: Optional[str] = None
    description: Optional[str] = None
    contracting_authority: Optional[str] = None
    categories: Optional[List[str]] = None
    sme_participation: Optional[bool] = None
    document_links: Optional[List[DocumentLink]] = None
    cpv_codes: Optional[List[str]] = None
    country: Optional[str] = None
    value: Optional[str] = None
    language: Optional[str] = "EN"


class FilterOptions(_CamelModel):
    """Caller-supplied search parameters for POST /api/rfp/search."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    search_term: Optional[str] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    category: Optional[Literal["all", "document-management", "record-management"]] = None
    sme_only: Optional[bool] = None

    @field_validator("search_term", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("date_from", "date_to", mode="before")
    @classmethod
    def compact_date(cls, v: Any) -> Any:
        """Accept YYYYMMDD or YYYY-MM-DD; store as YYYYMMDD."""
        if v is None:
            return None
        if not isinstance(v, str):
            return v
        compact = v.strip().replace("-", "")
        if not compact:
            return None
        if not _COMPACT_DATE_RE.match(compact):
            raise ValueError("date must be YYYYMMDD or YYYY-MM-DD")
        return compact


class SearchResponse(_CamelModel):
    """Search result. total is the upstream-reported count, not len(notices)."""

    notices: List[RFPNotice]
    total: int
    page: Optional[int] = None
    page_size: Optional[int] = None


class SearchErrorResponse(BaseModel):
    """Error body for POST /api/rfp/search (upstream, validation or internal failure)."""

    error: str
    details: Any = None
    notices: List[RFPNotice] = []
    total: int = 0


def empty_search_response() -> SearchResponse:
    """The "no results" response used when TED is off or its payload is unusable."""
    return SearchResponse(notices=[], total=0, page=1, page_size=0)
