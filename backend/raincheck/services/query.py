"""Place query normalization."""

import re
import unicodedata

from .errors import EmptyQueryError

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize(raw: str | None) -> str:
    """Canonicalize a free-text place query.

    NFKC-normalizes, collapses whitespace runs to one space and trims.
    Raises EmptyQueryError when nothing usable remains.
    """
    text = unicodedata.normalize("NFKC", raw or "")
    text = _WHITESPACE_RUN.sub(" ", text).strip()
    if not text:
        raise EmptyQueryError()
    return text


def with_region_hint(query: str, default_region: str) -> str:
    """Append ", <default_region>" unless the query already has a qualifier.

    A comma anywhere means the caller already supplied a region or country.
    """
    if "," in query:
        return query
    return f"{query}, {default_region}"
