"""Search query construction and result normalization."""

from src.search.query_builder import build_query
from src.search.results import (
    FormattedDate,
    NormalizedRecord,
    extract_results,
    format_date,
    normalize_hit,
)

__all__ = [
    "FormattedDate",
    "NormalizedRecord",
    "build_query",
    "extract_results",
    "format_date",
    "normalize_hit",
]
