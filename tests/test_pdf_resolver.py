"""Tests for matching job titles to exported PDF file names."""

import unicodedata

import pytest

from app.services.pdf_resolver import build_filename_candidates, fuzzy_key, resolve_pdf_filename


def test_candidates_start_with_title_and_are_unique() -> None:
    candidates = build_filename_candidates("営業/マーケ")

    assert candidates[0] == "営業/マーケ"
    assert "営業・マーケ" in candidates
    assert "営業 ・ マーケ" in candidates
    assert len(candidates) == len(set(candidates))


@pytest.mark.parametrize(
    ("title", "filename"),
    [
        ("営業/マーケ", "営業・マーケ.pdf"),
        ("営業　東京", "営業 東京.pdf"),
        ("【急募】営業", "【急募】 営業.pdf"),
        ("【急募】営業", "急募_営業.pdf"),
        ("【急募】営業", "急募営業.pdf"),
    ],
)
def test_exact_candidate_match(title: str, filename: str) -> None:
    assert resolve_pdf_filename(title, ["other.pdf", filename]) == filename


def test_decomposed_file_names_are_returned_as_listed() -> None:
    listed = unicodedata.normalize("NFD", "データ分析.pdf")

    assert resolve_pdf_filename("データ分析", [listed]) == listed


def test_fuzzy_containment_fallback() -> None:
    assert resolve_pdf_filename("営業 (東京)", ["経理.pdf", "営業東京勤務.pdf"]) == "営業東京勤務.pdf"


def test_non_pdf_files_are_ignored() -> None:
    assert resolve_pdf_filename("営業", ["営業.txt", "営業.docx"]) is None


def test_empty_fuzzy_key_never_matches() -> None:
    assert fuzzy_key("【 】") == ""
    assert resolve_pdf_filename("【 】", ["営業.pdf"]) is None
