import unicodedata
from typing import Optional, Tuple

# Names the SQLite connection hook registers; PostgreSQL uses ICU instead
SQLITE_FOLD_FUNCTION = "casefold"
SQLITE_TITLE_COLLATION = "unicode_title"
POSTGRES_TITLE_COLLATION = "und-x-icu"


def fold(text: Optional[str]) -> Optional[str]:
    """Unicode case folding ("ÉLÈVE" and "élève" fold to the same string)."""
    if text is None:
        return None
    return unicodedata.normalize("NFC", text).casefold()


def collation_key(text: str) -> Tuple[str, str, str]:
    """
    Dictionary-order key: base letters first (accents and case ignored), then
    accents, then case. "Éclair" sorts between "Alpha" and "Zeta".
    """
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), decomposed.casefold(), text


def compare_titles(left: str, right: str) -> int:
    a, b = collation_key(left), collation_key(right)
    return (a > b) - (a < b)
