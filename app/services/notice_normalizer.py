"""
Normalize raw TED search results into RFPNotice records.

TED has answered in two shapes over its API revisions:

- research API: {"results": [{"notice": {...camelCase...}}, ...], "total": N}
  (the record may also be flat, without the "notice" wrapper)
- notices API:  {"notices": [{"publication-number": ..., "sme-part": ..., "links": {...}}, ...],
  "totalNoticeCount": N}

Each output field is taken from the first present key of an ordered candidate list
(see the *_KEYS tuples below). Missing optional fields stay unset; a record that does
not validate as RFPNotice is dropped, so total and len(notices) may differ.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from app.api.schemas.rfp import RFPNotice, SearchResponse, empty_search_response

logger = logging.getLogger(__name__)

RESEARCH = "research"
NOTICES = "notices"

RECORDS_CONTAINER_KEYS = ("results", "notices")
TOTAL_KEYS = ("total", "totalResults", "totalNoticeCount", "totalCount")

MAX_DERIVED_CATEGORIES = 3
DEFAULT_LANGUAGE = "EN"
ENGLISH_KEYS = ("eng", "ENG", "en", "EN")

# ── research API flavor (camelCase, nested under item["notice"]) ─────

RESEARCH_ID_KEYS = ("id", "noticeId")
RESEARCH_TITLE_KEYS = ("title", "titleText")
RESEARCH_REFERENCE_KEYS = ("referenceNumber", "noticeNumber")
RESEARCH_PUBLICATION_DATE_KEYS = ("publicationDate", "dispatchDate")
RESEARCH_DEADLINE_KEYS = ("deadline", "tenderDeadline", "submissionDeadline")
RESEARCH_DESCRIPTION_KEYS = ("description", "shortDescription")
RESEARCH_AUTHORITY_KEYS = ("contractingAuthority", "buyer")
RESEARCH_CPV_KEYS = ("cpvCodes",)
RESEARCH_CATEGORY_KEYS = ("categories",)
RESEARCH_SME_KEYS = ("sme-part", "smeParticipation", "suitableForSME", "sme")
RESEARCH_COUNTRY_KEYS = ("country", "countryCode")
RESEARCH_VALUE_KEYS = ("value", "estimatedValue")
RESEARCH_LANGUAGE_KEYS = ("language",)
RESEARCH_SME_TRUE = frozenset({"YES", "yes", "TRUE", "true", "Y", "1"})
RESEARCH_UNTITLED = "Untitled Notice"

# ── notices API flavor (flat, hyphenated field names) ────────────────

NOTICES_ID_KEYS = ("publication-number", "ND", "noticeId")
NOTICES_TITLE_KEYS = ("notice-title", "title-proc", "title-glo", "TI")
NOTICES_REFERENCE_KEYS = ("publication-number", "notice-identifier")
NOTICES_PUBLICATION_DATE_KEYS = ("publication-date", "PD", "dispatch-date")
NOTICES_DEADLINE_KEYS = (
    "deadline-receipt-tender-date-lot",
    "deadline-date-lot",
    "deadline-date-part",
)
NOTICES_DESCRIPTION_KEYS = ("description-glo", "description-proc", "description-lot")
NOTICES_AUTHORITY_KEYS = ("buyer-name", "organisation-name-buyer")
NOTICES_CPV_KEYS = ("classification-cpv", "main-classification-proc")
NOTICES_CATEGORY_KEYS = ("categories",)
NOTICES_SME_KEYS = ("sme-part",)
NOTICES_COUNTRY_KEYS = ("buyer-country", "place-of-performance-country-proc")
NOTICES_VALUE_KEYS = ("framework-estimated-value-glo", "estimated-value-proc")
NOTICES_LANGUAGE_KEYS = ("submission-language",)
NOTICES_SME_TRUE = frozenset({"yes", "y", "true", "1"})  # compared lowercased
NOTICES_UNTITLED = "RFP Notice"
# also read at item level by the research flavor, so it does not decide the flavor
SHARED_HYPHENATED_KEYS = frozenset({"sme-part"})

# ── document links ───────────────────────────────────────────────────

DOCUMENT_LIST_KEYS = ("documents", "attachments", "links")
DOCUMENT_URL_KEYS = ("url", "link", "href")
DOCUMENT_TITLE_KEYS = ("title", "name", "description")
DOCUMENT_TYPE_KEYS = ("type", "format", "mimeType")
DOCUMENT_DEFAULT_TITLE = "Document"
# links.<key> = {lang_code: url}; one entry per language
LINK_FORMATS = (("pdf", "PDF"), ("xml", "XML"))
DOCUMENT_URL_LOT_KEY = "document-url-lot"
DOCUMENT_URL_LOT_TITLE = "Procurement documents"


# ── Value helpers ────────────────────────────────────────────────────


def pick_text(value: Any) -> Optional[str]:
    """
    Extract one string from a TED value: str, number, list (first non-empty entry)
    or multilingual dict ({"eng": "...", "fra": [...]}; English first).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        for entry in value:
            text = pick_text(entry)
            if text:
                return text
        return None
    if isinstance(value, dict):
        for lang in ENGLISH_KEYS:
            if lang in value:
                text = pick_text(value[lang])
                if text:
                    return text
        for v in value.values():
            text = pick_text(v)
            if text:
                return text
    return None


def pick_text_list(value: Any) -> list[str]:
    """Flatten a TED value into a de-duplicated list of strings (order kept)."""
    out: list[str] = []

    def _walk(v: Any) -> None:
        if isinstance(v, list):
            for entry in v:
                _walk(entry)
        elif isinstance(v, dict):
            text = pick_text(v.get("code")) or pick_text(v.get("value"))
            if text is None:
                for inner in v.values():
                    _walk(inner)
            elif text not in out:
                out.append(text)
        else:
            text = pick_text(v)
            if text and text not in out:
                out.append(text)

    _walk(value)
    return out


def first_present(sources: Iterable[dict[str, Any]], keys: Iterable[str]) -> Any:
    """First truthy value found for keys (in order), looking in each source in order."""
    keys = tuple(keys)
    for source in sources:
        if not isinstance(source, dict):
            continue
        for key in keys:
            value = source.get(key)
            if value not in (None, "", [], {}):
                return value
    return None


def first_text(sources: Iterable[dict[str, Any]], keys: Iterable[str]) -> Optional[str]:
    keys = tuple(keys)
    for source in sources:
        if not isinstance(source, dict):
            continue
        for key in keys:
            text = pick_text(source.get(key))
            if text:
                return text
    return None


def _authority_name(value: Any) -> Optional[str]:
    """contractingAuthority / buyer may be {"name": ...}, a plain string or multilingual."""
    if isinstance(value, dict) and any(k in value for k in ("name", "legalName", "officialName")):
        return pick_text(value.get("name") or value.get("legalName") or value.get("officialName"))
    return pick_text(value)


def is_sme_true(value: Any, flavor: str) -> bool:
    """
    True only for boolean True or a truthy token. Research tokens are matched exactly
    (after trimming); notices-API tokens case-insensitively. Lists use their first entry.
    """
    if isinstance(value, list):
        value = value[0] if value else None
    if value is True:
        return True
    if not isinstance(value, str):
        return False
    token = value.strip()
    if flavor == NOTICES:
        return token.lower() in NOTICES_SME_TRUE
    return token in RESEARCH_SME_TRUE


# ── Document links ───────────────────────────────────────────────────


def _document_entry(doc: Any) -> Optional[dict[str, Any]]:
    if isinstance(doc, str):
        url = doc.strip()
        return {"url": url, "title": DOCUMENT_DEFAULT_TITLE} if url else None
    if not isinstance(doc, dict):
        return None
    url = first_text([doc], DOCUMENT_URL_KEYS)
    if not url:
        return None
    entry: dict[str, Any] = {
        "url": url,
        "title": first_text([doc], DOCUMENT_TITLE_KEYS) or DOCUMENT_DEFAULT_TITLE,
    }
    doc_type = first_text([doc], DOCUMENT_TYPE_KEYS)
    if doc_type:
        entry["type"] = doc_type
    return entry


def _language_links(links: dict[str, Any]) -> list[dict[str, Any]]:
    """Expand links.pdf / links.xml ({lang: url} or a bare url) into one entry per language."""
    out: list[dict[str, Any]] = []
    for key, label in LINK_FORMATS:
        by_lang = links.get(key)
        if isinstance(by_lang, str) and by_lang.strip():
            out.append({"url": by_lang.strip(), "title": label, "type": label})
        elif isinstance(by_lang, dict):
            for lang, url in by_lang.items():
                url_text = pick_text(url)
                if url_text:
                    out.append({
                        "url": url_text,
                        "title": f"{label} ({str(lang).upper()})",
                        "type": label,
                    })
    return out


def extract_document_links(notice: dict[str, Any], flavor: str) -> list[dict[str, Any]]:
    """
    Gather document links from the first list container (documents, attachments, links);
    for the notices API also from the links.pdf/links.xml mapping and document-url-lot.
    Entries without a usable url are dropped.
    """
    for key in DOCUMENT_LIST_KEYS:
        container = notice.get(key)
        if isinstance(container, list):
            return [e for e in (_document_entry(d) for d in container) if e]

    if flavor != NOTICES:
        return []

    out: list[dict[str, Any]] = []
    links = notice.get("links")
    if isinstance(links, dict):
        out.extend(_language_links(links))
    for url in pick_text_list(notice.get(DOCUMENT_URL_LOT_KEY)):
        out.append({"url": url, "title": DOCUMENT_URL_LOT_TITLE})
    return out


# ── Record mapping ───────────────────────────────────────────────────


def detect_flavor(item: dict[str, Any]) -> str:
    """
    notices API when the record has a links mapping or hyphenated keys other than sme-part;
    research API otherwise (including flat records that only carry sme-part).
    """
    if isinstance(item.get("notice"), dict):
        return RESEARCH
    if isinstance(item.get("links"), dict):
        return NOTICES
    if any(isinstance(k, str) and "-" in k and k not in SHARED_HYPHENATED_KEYS for k in item):
        return NOTICES
    return RESEARCH


def _categories(sources: list[dict[str, Any]], keys: Iterable[str], cpv_codes: list[str]) -> list[str]:
    categories = pick_text_list(first_present(sources, keys))
    if categories:
        return categories
    return cpv_codes[:MAX_DERIVED_CATEGORIES]


def _map_research(item: dict[str, Any], index: int, now: str) -> dict[str, Any]:
    notice = item["notice"] if isinstance(item.get("notice"), dict) else item
    sources = [notice]
    cpv_codes = pick_text_list(first_present(sources, RESEARCH_CPV_KEYS))
    # sme-part can sit on the wrapper item as well as on the notice
    sme_raw = first_present([item], ("sme-part",)) if item is not notice else None
    if sme_raw is None:
        sme_raw = first_present(sources, RESEARCH_SME_KEYS)

    authority = None
    for key in RESEARCH_AUTHORITY_KEYS:
        authority = _authority_name(notice.get(key))
        if authority:
            break

    return {
        "id": first_text(sources, RESEARCH_ID_KEYS) or f"notice-{index}",
        "title": first_text(sources, RESEARCH_TITLE_KEYS) or RESEARCH_UNTITLED,
        "referenceNumber": first_text(sources, RESEARCH_REFERENCE_KEYS),
        "publicationDate": first_text(sources, RESEARCH_PUBLICATION_DATE_KEYS) or now,
        "deadline": first_text(sources, RESEARCH_DEADLINE_KEYS),
        "description": first_text(sources, RESEARCH_DESCRIPTION_KEYS),
        "contractingAuthority": authority,
        "categories": _categories(sources, RESEARCH_CATEGORY_KEYS, cpv_codes),
        "smeParticipation": is_sme_true(sme_raw, RESEARCH),
        "documentLinks": extract_document_links(notice, RESEARCH),
        "cpvCodes": cpv_codes,
        "country": first_text(sources, RESEARCH_COUNTRY_KEYS),
        "value": first_text(sources, RESEARCH_VALUE_KEYS),
        "language": first_text(sources, RESEARCH_LANGUAGE_KEYS) or DEFAULT_LANGUAGE,
    }


def _map_notices_api(item: dict[str, Any], index: int, now: str) -> dict[str, Any]:
    sources = [item]
    cpv_codes = pick_text_list(first_present(sources, NOTICES_CPV_KEYS))
    reference = first_text(sources, NOTICES_REFERENCE_KEYS)
    return {
        "id": first_text(sources, NOTICES_ID_KEYS) or f"notice-{index}",
        "title": first_text(sources, NOTICES_TITLE_KEYS) or reference or NOTICES_UNTITLED,
        "referenceNumber": reference,
        "publicationDate": first_text(sources, NOTICES_PUBLICATION_DATE_KEYS) or now,
        "deadline": first_text(sources, NOTICES_DEADLINE_KEYS),
        "description": first_text(sources, NOTICES_DESCRIPTION_KEYS),
        "contractingAuthority": first_text(sources, NOTICES_AUTHORITY_KEYS),
        "categories": _categories(sources, NOTICES_CATEGORY_KEYS, cpv_codes),
        "smeParticipation": is_sme_true(first_present(sources, NOTICES_SME_KEYS), NOTICES),
        "documentLinks": extract_document_links(item, NOTICES),
        "cpvCodes": cpv_codes,
        "country": first_text(sources, NOTICES_COUNTRY_KEYS),
        "value": first_text(sources, NOTICES_VALUE_KEYS),
        "language": first_text(sources, NOTICES_LANGUAGE_KEYS) or DEFAULT_LANGUAGE,
    }


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_notice(item: dict[str, Any], index: int, now: Optional[str] = None) -> dict[str, Any]:
    """
    Map one raw TED record to an RFPNotice-shaped dict (camelCase keys, not yet validated).
    index is the record's zero-based position, used for the notice-<index> placeholder id.
    now fills a missing publication date (TED only returns the requested fields);
    defaults to the current UTC time.
    """
    now = now or utc_now_iso()
    if detect_flavor(item) == NOTICES:
        candidate = _map_notices_api(item, index, now)
    else:
        candidate = _map_research(item, index, now)
    if not candidate["documentLinks"]:
        logger.warning("Notice %s has no valid document links", candidate["id"])
    return {k: v for k, v in candidate.items() if v is not None}


# ── Response mapping ─────────────────────────────────────────────────


def _records(raw: Any) -> Optional[list[Any]]:
    if not isinstance(raw, dict):
        return None
    for key in RECORDS_CONTAINER_KEYS:
        container = raw.get(key)
        if isinstance(container, list):
            return container
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def validate_notices(records: list[Any], now: Optional[str] = None) -> tuple[list[RFPNotice], int]:
    """Normalize and validate each record; returns (valid notices, dropped count)."""
    now = now or utc_now_iso()
    notices: list[RFPNotice] = []
    dropped = 0
    for index, item in enumerate(records):
        if not isinstance(item, dict):
            logger.warning("Dropping TED record %s: not an object (%s)", index, type(item).__name__)
            dropped += 1
            continue
        try:
            candidate = normalize_notice(item, index, now)
        except Exception:
            logger.exception("Dropping TED record %s: normalization failed", index)
            dropped += 1
            continue
        try:
            notices.append(RFPNotice.model_validate(candidate))
        except ValidationError as e:
            logger.warning(
                "Dropping TED record %s (%s): %s",
                index,
                candidate.get("id"),
                e.errors(include_url=False),
            )
            dropped += 1
    return notices, dropped


def normalize_search_response(raw: Any, now: Optional[str] = None) -> SearchResponse:
    """
    Normalize a raw TED search response.

    Records without a publication date get now (one timestamp per response, current UTC
    time unless given), so the output is deterministic for a fixed now.

    When no records container ("results" or "notices" list) can be located, returns the
    empty result {notices: [], total: 0, page: 1, pageSize: 0} instead of raising.
    """
    records = _records(raw)
    if records is None:
        keys = sorted(raw.keys()) if isinstance(raw, dict) else type(raw).__name__
        logger.error("TED response has no records container; returning empty result (got %s)", keys)
        return empty_search_response()

    notices, dropped = validate_notices(records, now)

    total = None
    for key in TOTAL_KEYS:
        total = _as_int(raw.get(key))
        if total is not None:
            break
    if total is None:
        total = len(notices)

    page = _as_int(raw.get("page")) or 1
    page_size = _as_int(raw.get("pageSize"))
    if page_size is None:
        # every record is mapped before the schema gate, so this is the mapped count
        page_size = len(records)

    logger.info(
        "TED response normalized: %s raw records, %s notices, %s dropped, total=%s",
        len(records),
        len(notices),
        dropped,
        total,
    )
    return SearchResponse(notices=notices, total=total, page=page, page_size=page_size)
