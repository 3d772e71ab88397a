"""Match a job title to the PDF file exported for it.

Exported file names drift from the stored titles: decomposed kana, full-width
spaces, ``/`` written as ``・``, and ``【】`` brackets spaced, replaced or
dropped. Resolution tries a list of candidate spellings first and falls back
to a normalized containment match.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import Iterable

logger = logging.getLogger(__name__)

PDF_SUFFIX = ".pdf"
FULL_WIDTH_SPACE = "　"

_SLASH = re.compile(r"\s*/\s*")
_WHITESPACE = re.compile(r"\s+")
_BRACKETED = re.compile(r"【([^】]+)】")
_FUZZY_DROP = re.compile(r"[\s　【】「」（）()]")

# Replacements for "/" seen in exported names.
_SLASH_VARIANTS = (" ・ ", "・ ", " ・", "・")


def _space_normalized(text: str) -> str:
    return _WHITESPACE.sub(" ", text.replace(FULL_WIDTH_SPACE, " "))


def build_filename_candidates(title: str) -> list[str]:
    """Candidate file names (without extension) for a job title.

    Order matters: earlier candidates are closer to the stored title.
    Duplicates are removed keeping first-seen order.
    """
    title = unicodedata.normalize("NFC", title)
    bases = [title, *(_SLASH.sub(variant, title) for variant in _SLASH_VARIANTS)]

    candidates: list[str] = []
    for base in bases:
        spaced_close = base.replace("】", "】 ")
        spaced_open = base.replace("【", " 【")
        underscored = _BRACKETED.sub(r"\1_", base)
        unbracketed = base.replace("【", "").replace("】", "")

        candidates.extend(
            [
                base,
                base.replace(FULL_WIDTH_SPACE, " "),
                _space_normalized(base),
                _space_normalized(base).strip(),
                spaced_close,
                _space_normalized(spaced_close),
                spaced_open,
                _space_normalized(spaced_open),
                underscored,
                _space_normalized(underscored),
                unbracketed,
                _space_normalized(unbracketed),
            ]
        )

    return list(dict.fromkeys(candidates))


def fuzzy_key(name: str) -> str:
    """Lowercased name without whitespace and bracket punctuation."""
    return unicodedata.normalize("NFC", _FUZZY_DROP.sub("", name.lower()))


def resolve_pdf_filename(title: str, available: Iterable[str]) -> str | None:
    """Pick the file in ``available`` that belongs to ``title``.

    Args:
        title: Stored job title.
        available: File names present in the company's PDF directory.

    Returns:
        The matching file name, or None.
    """
    files = list(available)
    # Directory listings may hold decomposed (NFD) names.
    present = {unicodedata.normalize("NFC", name): name for name in files}

    for candidate in build_filename_candidates(title):
        filename = f"{candidate}{PDF_SUFFIX}"
        if filename in present:
            logger.debug("pdf.exact_match", extra={"candidate": candidate})
            return present[filename]

    title_key = fuzzy_key(unicodedata.normalize("NFC", title))
    if not title_key:
        return None

    for filename in files:
        if not filename.endswith(PDF_SUFFIX):
            continue
        file_key = fuzzy_key(filename[: -len(PDF_SUFFIX)])
        if file_key and (file_key in title_key or title_key in file_key):
            logger.debug("pdf.fuzzy_match", extra={"pdf_file": filename})
            return filename

    return None
