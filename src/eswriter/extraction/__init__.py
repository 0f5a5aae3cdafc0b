"""Question extraction from raw form markup."""

from eswriter.extraction.questions import clean_html, extract_questions

__all__ = ["clean_html", "extract_questions"]
