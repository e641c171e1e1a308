"""API schemas."""
from app.api.schemas.rfp import DocumentLink, FilterOptions, RFPNotice, SearchErrorResponse, SearchResponse

__all__ = ["DocumentLink", "FilterOptions", "RFPNotice", "SearchErrorResponse", "SearchResponse"]
