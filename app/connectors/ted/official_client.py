"""Official TED (Tenders Electronic Daily) EU Search API client."""
import json
import logging
from typing import Any, Optional

import requests

from app.connectors.ted.exceptions import TEDResponseFormatError, TEDUpstreamError

logger = logging.getLogger(__name__)

RESPONSE_BODY_TRUNCATE = 4000
LOG_BODY_PREVIEW_CHARS = 500

# Confirmed working endpoint path
TED_SEARCH_PATH = "/v3/notices/search"

# TED requires a non-empty fields array; sme-part is the only field the RFP search needs
DEFAULT_FIELDS = ["sme-part"]


class OfficialTEDClient:
    """
    Official TED Search API client.
    Uses endpoint: POST https://api.ted.europa.eu/v3/notices/search
    with an expert query and the fields array. One request per search, never retried.
    Each search opens and closes its own requests.Session; the client itself only holds config.
    No authentication required (public API).
    """

    def __init__(
        self,
        search_base_url: str,
        timeout_seconds: Optional[float] = None,
    ):
        self.search_base_url = (search_base_url or "").rstrip("/")
        self.timeout_seconds = timeout_seconds

    @property
    def search_url(self) -> str:
        return f"{self.search_base_url}{TED_SEARCH_PATH}"

    def search(self, query: str, fields: Optional[list[str]] = None) -> dict[str, Any]:
        """
        POST {query, fields} to the TED search endpoint and return the parsed JSON body.

        Raises TEDUpstreamError on non-2xx or transport failure (status and body attached),
        TEDResponseFormatError when the body is HTML or not JSON.
        """
        fields_list = fields if fields and isinstance(fields, list) else DEFAULT_FIELDS
        body: dict[str, Any] = {"query": query, "fields": fields_list}
        url = self.search_url

        logger.info("TED EUROPA query: %s", query)
        session = requests.Session()
        try:
            resp = session.request(
                "POST",
                url,
                json=body,
                headers={"Accept": "application/json", "Content-Type": "application/json"},
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            logger.error("TED request failed: %s", e)
            raise TEDUpstreamError(None, str(e)) from e
        finally:
            session.close()

        status = resp.status_code
        resp_text = resp.text if isinstance(resp.text, str) else ""
        logger.info("TED API response status: %s", status)

        if not resp.ok:
            snippet = resp_text[:RESPONSE_BODY_TRUNCATE]
            logger.error("TED API error: %s %s", status, snippet)
            raise TEDUpstreamError(status, snippet)

        # Detect HTML responses (wrong endpoint, e.g. website instead of API)
        ct = resp.headers.get("Content-Type") or ""
        ct = ct.lower() if isinstance(ct, str) else ""
        if "text/html" in ct or resp_text.lstrip().startswith("<"):
            raise TEDResponseFormatError(
                "Received HTML, likely wrong endpoint. Ensure TED_SEARCH_BASE_URL points to the API host "
                f"(e.g. https://api.ted.europa.eu). Response snippet: {resp_text[:1000]!r}"
            )

        try:
            data = resp.json()
        except ValueError:
            logger.error("TED API returned non-JSON (status=%s)", status)
            raise TEDResponseFormatError(
                f"TED Search API returned non-JSON (status={status}): {resp_text[:RESPONSE_BODY_TRUNCATE]}"
            ) from None

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "TED API response: %s",
                json.dumps(data, indent=2, default=str)[:LOG_BODY_PREVIEW_CHARS],
            )
        return data
