"""Tests for POST /api/rfp/search (TED mocked at the service boundary)."""
from unittest.mock import patch

from fastapi.testclient import TestClient
from pydantic import ValidationError

from app.api.schemas.rfp import SearchResponse
from app.connectors.ted.exceptions import TEDResponseFormatError, TEDUpstreamError
from app.main import app

client = TestClient(app)

SEARCH_URL = "/api/rfp/search"
TED_SEARCH = "app.services.rfp_search_service.ted_client.search_notices"


def test_search_returns_camel_case_notices(notices_api_response):
    with patch(TED_SEARCH, return_value=notices_api_response):
        response = client.post(SEARCH_URL, json={"category": "all"})

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert data["page"] == 1
    assert data["pageSize"] == 2
    first = data["notices"][0]
    assert first["id"] == "00612345-2025"
    assert first["publicationDate"] == "2025-10-10+02:00"
    assert first["smeParticipation"] is True
    assert first["documentLinks"][0] == {
        "url": "https://ted.europa.eu/en/notice/00612345-2025/pdf",
        "title": "PDF (ENG)",
        "type": "PDF",
    }
    # unset optional fields are omitted, not null
    assert "deadline" not in first


def test_notice_without_publication_date_is_returned():
    raw = {
        "notices": [
            {
                "publication-number": "00612345-2025",
                "sme-part": "yes",
                "links": {"pdf": {"ENG": "http://x/a.pdf"}},
            }
        ],
        "totalNoticeCount": 1,
    }
    with patch(TED_SEARCH, return_value=raw):
        response = client.post(SEARCH_URL, json={})

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert [n["id"] for n in data["notices"]] == ["00612345-2025"]
    assert data["notices"][0]["publicationDate"].endswith("+00:00")


def test_empty_body_uses_default_filters():
    with patch(TED_SEARCH, return_value={"notices": []}) as mock_search:
        response = client.post(SEARCH_URL)

    assert response.status_code == 200
    assert response.json() == {"notices": [], "total": 0, "page": 1, "pageSize": 0}
    query = mock_search.call_args[0][0]
    assert "(publication-date>=20251001<=today())" in query


def test_filters_reach_query():
    with patch(TED_SEARCH, return_value={"notices": []}) as mock_search:
        response = client.post(
            SEARCH_URL,
            json={"searchTerm": "archive", "category": "document-management", "dateTo": "2025-12-31"},
        )
    assert response.status_code == 200
    query = mock_search.call_args[0][0]
    assert query == (
        "(publication-date>=20251001<=20251231) AND (FT~\"Document Management\") "
        "AND (FT~\"archive\") AND (submission-language=ENG)"
    )


def test_sme_only_filters_results(sme_mixed_response):
    with patch(TED_SEARCH, return_value=sme_mixed_response):
        response = client.post(SEARCH_URL, json={"category": "record-management", "smeOnly": True})
    data = response.json()
    assert response.status_code == 200
    assert [n["id"] for n in data["notices"]] == ["1-2025"]
    assert data["total"] == 3


def test_invalid_category_is_400():
    with patch(TED_SEARCH) as mock_search:
        response = client.post(SEARCH_URL, json={"category": "case-management"})
    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "Invalid request data"
    assert data["notices"] == []
    assert data["total"] == 0
    assert isinstance(data["details"], list)
    mock_search.assert_not_called()


def test_invalid_json_and_bad_date_are_400():
    response = client.post(SEARCH_URL, content=b"{not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    response = client.post(SEARCH_URL, json={"dateFrom": "01/10/2025"})
    assert response.status_code == 400
    response = client.post(SEARCH_URL, json={"unknownFilter": 1})
    assert response.status_code == 400


def test_upstream_status_is_mirrored():
    with patch(TED_SEARCH, side_effect=TEDUpstreamError(429, '{"message": "Too many requests"}')):
        response = client.post(SEARCH_URL, json={})
    assert response.status_code == 429
    assert response.json() == {
        "error": "Failed to fetch data from TED EUROPA",
        "details": '{"message": "Too many requests"}',
        "notices": [],
        "total": 0,
    }


def test_unreachable_upstream_is_502():
    with patch(TED_SEARCH, side_effect=TEDUpstreamError(None, "connection refused")):
        response = client.post(SEARCH_URL, json={})
    assert response.status_code == 502
    assert response.json()["details"] == "connection refused"


def test_unparseable_upstream_json_is_500():
    with patch(TED_SEARCH, side_effect=TEDResponseFormatError("TED Search API returned non-JSON (status=200): x")):
        response = client.post(SEARCH_URL, json={})
    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "Internal server error"
    assert "non-JSON" in data["details"]
    assert data["notices"] == [] and data["total"] == 0


def test_output_contract_violation_is_400():
    try:
        SearchResponse.model_validate({"notices": [{"id": ""}], "total": "many"})
    except ValidationError as e:
        contract_error = e
    with patch("app.api.routes.rfp.search_rfp_notices", side_effect=contract_error):
        response = client.post(SEARCH_URL, json={})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request data"


def test_malformed_upstream_payload_degrades_to_empty_result():
    with patch(TED_SEARCH, return_value={"unexpected": "shape"}):
        response = client.post(SEARCH_URL, json={})
    assert response.status_code == 200
    assert response.json() == {"notices": [], "total": 0, "page": 1, "pageSize": 0}
