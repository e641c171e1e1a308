"""Build TED expert queries from RFP search filters.

Clause order is fixed: publication date range, category, optional search term,
submission language. SME participation is not expressible reliably in the
expert query language and is filtered after normalization instead.
"""
from app.api.schemas.rfp import FilterOptions

DEFAULT_DATE_FROM = "20251001"
DATE_TO_SENTINEL = "today()"
SUBMISSION_LANGUAGE = "ENG"

# category key -> full-text term; order matters for the "all" clause
CATEGORY_TERMS: dict[str, str] = {
    "document-management": "Document Management",
    "record-management": "Record Management",
    "case-management": "Case Management",
    "call-centre": "Call Centre",
}
ALL_CATEGORY_TERMS: tuple[str, ...] = tuple(CATEGORY_TERMS.values())


def ft_clause(term: str) -> str:
    """Full-text match clause: (FT~"term"). Double quotes in term are escaped."""
    escaped = term.replace('"', '\\"')
    return f'(FT~"{escaped}")'


def date_range_clause(date_from: str | None = None, date_to: str | None = None) -> str:
    """Publication date window; compact YYYYMMDD bounds, defaults to DEFAULT_DATE_FROM..today()."""
    start = (date_from or DEFAULT_DATE_FROM).replace("-", "")
    end = (date_to or "").replace("-", "") or DATE_TO_SENTINEL
    return f"(publication-date>={start}<={end})"


def category_clause(category: str | None = None) -> str:
    """Single clause for document/record management; OR of every category otherwise."""
    if category in ("document-management", "record-management"):
        return ft_clause(CATEGORY_TERMS[category])
    return "(" + " OR ".join(ft_clause(t) for t in ALL_CATEGORY_TERMS) + ")"


def build_rfp_query(filters: FilterOptions | None = None) -> str:
    """
    Build the TED expert query for an RFP search.

    >>> build_rfp_query(FilterOptions(category="document-management"))
    '(publication-date>=20251001<=today()) AND (FT~"Document Management") AND (submission-language=ENG)'
    """
    filters = filters or FilterOptions()
    parts = [
        date_range_clause(filters.date_from, filters.date_to),
        category_clause(filters.category),
    ]

    search_term = (filters.search_term or "").strip()
    if search_term:
        parts.append(ft_clause(search_term))

    parts.append(f"(submission-language={SUBMISSION_LANGUAGE})")
    return " AND ".join(parts)
