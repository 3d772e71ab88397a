import re
import unicodedata

# Hiragana, katakana, CJK unified ideographs, ASCII alphanumerics, whitespace.
_KEYWORD_DISALLOWED = re.compile(r"[^\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FAFa-zA-Z0-9\s]")


def normalize_text(text: str) -> str:
    """Normalize text by standardizing line breaks and whitespace.

    Converts different line break formats to standard newlines,
    collapses multiple spaces/tabs into single spaces, and reduces
    excessive blank lines.

    Args:
        text: Raw text to normalize.

    Returns:
        str: Normalized and trimmed text.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def normalize_keyword(raw: str) -> str:
    """Normalize a search keyword.

    NFKC folds full-width letters and digits to ASCII, then every character
    outside the Japanese scripts, ASCII letters/digits and whitespace is
    dropped. The result is lowercased and trimmed.

    Examples:
        >>> normalize_keyword("  ＰＹＴＨＯＮ ")
        'python'
        >>> normalize_keyword("C++/Go")
        'cgo'
        >>> normalize_keyword("エンジニア（東京）")
        'エンジニア東京'
    """
    normalized = unicodedata.normalize("NFKC", raw)
    normalized = _KEYWORD_DISALLOWED.sub("", normalized)
    return normalized.lower().strip()


def contains_ignore_case(haystack: str | None, needle: str) -> bool:
    """Literal, case-insensitive substring test; None never matches."""
    if not haystack:
        return False
    return needle.lower() in haystack.lower()
