"""Application services."""
from app.services.notice_normalizer import normalize_search_response
from app.services.rfp_search_service import search_rfp_notices

__all__ = ["normalize_search_response", "search_rfp_notices"]
