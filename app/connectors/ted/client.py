"""Router for TED connector (TED_MODE: official | off)."""
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Holds configuration only (no session or other per-request state)
_client: Any = None


def get_client():
    """Return official TED client when mode is official; None when off."""
    global _client
    if _client is not None:
        return _client

    from app.core.config import settings

    if settings.ted_mode == "off":
        logger.info("TED connector: off")
        return None

    from app.connectors.ted.official_client import OfficialTEDClient

    _client = OfficialTEDClient(
        search_base_url=settings.ted_search_base_url,
        timeout_seconds=settings.ted_timeout_seconds,
    )
    logger.info("TED connector: official (%s)", settings.ted_search_base_url)
    return _client


def search_notices(query: str, fields: Optional[list[str]] = None) -> dict[str, Any]:
    """
    Run one TED expert query. When TED_MODE is "official", calls the TED Search API
    and returns its raw JSON. When TED_MODE is "off", returns an empty provider-shaped result.
    """
    client = get_client()
    if client is None:
        return {"notices": [], "totalNoticeCount": 0}
    return client.search(query, fields=fields)


def reset_client() -> None:
    """Reset cached client (for tests)."""
    global _client
    _client = None
