from __future__ import annotations

import re
import unicodedata

# Underscores come from IANA names ("New_York") and are treated as spaces
SEP_RE = re.compile(r"[\s_]+")


def fold_diacritics(s: str) -> str:
    decomposed = unicodedata.normalize("NFKD", s)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def normalize_text(s: str) -> str:
    """Fold a query or field value into the form used for fuzzy comparison.

    Lower-cases (casefold), strips accents ("São Paulo" -> "sao paulo"),
    treats underscores as spaces and collapses whitespace runs.
    """
    return SEP_RE.sub(" ", fold_diacritics(s).casefold()).strip()


__all__ = ["normalize_text", "fold_diacritics"]
