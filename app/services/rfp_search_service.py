"""RFP search: filters -> TED expert query -> one upstream call -> normalized notices."""
import logging

from app.api.schemas.rfp import FilterOptions, SearchResponse
from app.connectors.ted import client as ted_client
from app.connectors.ted.query_builder import build_rfp_query
from app.services.notice_normalizer import normalize_search_response

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ["sme-part"]


def apply_sme_filter(response: SearchResponse) -> SearchResponse:
    """Keep only notices marked suitable for SMEs. total stays the upstream count."""
    notices = [n for n in response.notices if n.sme_participation is True]
    return response.model_copy(update={"notices": notices})


def search_rfp_notices(filters: FilterOptions | None = None) -> SearchResponse:
    """
    Run one RFP search against TED.

    Raises TEDUpstreamError / TEDResponseFormatError from the connector unchanged;
    per-record anomalies never raise (see notice_normalizer).
    """
    filters = filters or FilterOptions()
    query = build_rfp_query(filters)
    raw = ted_client.search_notices(query, fields=SEARCH_FIELDS)
    response = normalize_search_response(raw)

    if filters.sme_only:
        before = len(response.notices)
        response = apply_sme_filter(response)
        logger.info("SME filter kept %s of %s notices", len(response.notices), before)
    return response
