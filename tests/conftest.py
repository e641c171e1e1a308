"""Pytest configuration and shared fixtures.

Set TED environment before any app module imports so Settings never reads a local .env.
Provides raw TED payloads in both API flavors and a mocked requests.Session response.
"""
import copy
import os
from unittest.mock import MagicMock

import pytest

# Force deterministic connector config before any app import
os.environ["TED_MODE"] = "official"
os.environ["TED_SEARCH_BASE_URL"] = "https://api.ted.europa.eu"
os.environ.pop("TED_TIMEOUT_SECONDS", None)

from app.connectors.ted.client import reset_client


# ── Raw TED payloads ─────────────────────────────────────────────────

RESEARCH_RESPONSE = {
    "results": [
        {
            "notice": {
                "id": "2025-OJS-001",
                "title": "Electronic document management system",
                "referenceNumber": "REF-001",
                "publicationDate": "2025-10-02",
                "deadline": "2025-11-15",
                "description": "Supply of an EDMS",
                "contractingAuthority": {"name": "City of Dublin"},
                "cpvCodes": ["48311000", "72212311", "48000000", "72000000"],
                "country": "IRL",
                "estimatedValue": 250000,
                "documents": [
                    {"url": "https://ted.europa.eu/doc/1.pdf", "title": "Tender spec", "type": "PDF"},
                    {"url": "", "title": "Broken link"},
                ],
            },
            "sme-part": "YES",
        },
        {
            "notice": {
                "noticeId": "2025-OJS-002",
                "titleText": "Records archive digitisation",
                "dispatchDate": "2025-10-05",
                "buyer": {"name": "National Archives"},
                "smeParticipation": "no",
                "categories": ["Record Management"],
            },
        },
    ],
    "total": 57,
    "page": 1,
    "pageSize": 2,
}

NOTICES_API_RESPONSE = {
    "notices": [
        {
            "publication-number": "00612345-2025",
            "notice-title": {"eng": "Case management platform", "fra": "Plateforme de gestion"},
            "publication-date": "2025-10-10+02:00",
            "buyer-name": {"eng": ["Ministry of Justice"]},
            "buyer-country": ["BEL"],
            "classification-cpv": ["72212000", "48000000"],
            "sme-part": "true",
            "links": {
                "pdf": {"ENG": "https://ted.europa.eu/en/notice/00612345-2025/pdf"},
                "xml": {"MUL": "https://ted.europa.eu/en/notice/00612345-2025/xml"},
            },
        },
        {
            "publication-number": "00612346-2025",
            "publication-date": "2025-10-11",
            "sme-part": "false",
        },
    ],
    "totalNoticeCount": 2,
}

# Three records, only the first marked suitable for SMEs
SME_MIXED_RESPONSE = {
    "notices": [
        {"publication-number": "1-2025", "notice-title": "Records centre", "publication-date": "2025-10-01", "sme-part": "YES"},
        {"publication-number": "2-2025", "notice-title": "Records audit", "publication-date": "2025-10-02", "sme-part": "no"},
        {"publication-number": "3-2025", "notice-title": "Records storage", "publication-date": "2025-10-03"},
    ],
    "totalNoticeCount": 3,
}


@pytest.fixture()
def research_response() -> dict:
    return copy.deepcopy(RESEARCH_RESPONSE)


@pytest.fixture()
def notices_api_response() -> dict:
    return copy.deepcopy(NOTICES_API_RESPONSE)


@pytest.fixture()
def sme_mixed_response() -> dict:
    return copy.deepcopy(SME_MIXED_RESPONSE)


def make_response(status_code: int = 200, json_data=None, text: str | None = None, content_type: str = "application/json"):
    """Build a MagicMock shaped like requests.Response."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 300
    resp.url = "https://api.ted.europa.eu/v3/notices/search"
    resp.headers = {"Content-Type": content_type}
    resp.text = text if text is not None else ("{}" if json_data is not None else "")
    if json_data is not None:
        resp.json.return_value = json_data
    else:
        resp.json.side_effect = ValueError("No JSON object could be decoded")
    return resp


@pytest.fixture(autouse=True)
def reset_ted_client():
    """Reset the cached TED client around every test."""
    reset_client()
    yield
    reset_client()


# ── Markers ──────────────────────────────────────────────────────────

def pytest_configure(config):
    config.addinivalue_line("markers", "integration: marks integration tests")
    config.addinivalue_line("markers", "unit: marks unit tests")
