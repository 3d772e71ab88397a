"""Convert free-text company dossiers into structured JSON.

Dossiers are exported from the agency's recruiting CRM as loosely formatted
Japanese text. Parsing is pattern based: every rule looks for one marker
(``契約期間``, ``紹介料率``, ``難易度`` ...) anywhere in the text and fills a
single field when it matches. Unmatched fields keep their empty defaults.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from app.utils.text_normalizer import normalize_text

logger = logging.getLogger(__name__)

RAW_SUFFIX = ".txt"

_CONTRACT_ACTIVE = re.compile(r"契約状況\s*契約有り")
_CONTRACT_PERIOD = re.compile(r"契約期間\s*(\d{4}-\d{2}-\d{2})\s*~")
_COMMISSION = re.compile(r"紹介料率\s*\(%\)\s*([\d.]+)%")
_REFUND_TIER = re.compile(r"(\d+)[カヶか月]+\s*[以内超え]*\s*(\d+)[％%]")
_EMAIL = re.compile(r"([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})")
_URL = re.compile(r"URL\s*(https?://\S+)")
_ATS = re.compile(r"(HRMOS|専用|ATS)", re.IGNORECASE)
_APPLICATION_URL = re.compile(r"(https?://\S*(?:jposting|agent|recruit)\S*)")
_LOGIN_ID = re.compile(r"(?:■)?ID[：:\s]*(\S+)")
_PASSWORD = re.compile(r"(?:■)?(?:パスワード|PW|password)[：:\s]*(\S+)")
_QUOTED = re.compile(r'"([^"]+)"')
_BULLET_SPLIT = re.compile(r"[・\n]")
_EMPLOYEES = re.compile(r"(?:社員|従業員[数]?)[：:\s]*(\d+[人名]*)")
_WORK_FORMAT = re.compile(r"(リモート[可能]*|フレックス)[^\n]*", re.IGNORECASE)
_NG_NOTE = re.compile(r"(?:併願NG|NG|注意事項)[：:\s]*([^\n]+)")
_REQUIREMENTS = re.compile(r'採用要件[^\n]*\n"([^"]+)"')
_DIFFICULTY = re.compile(r"(?:難易度|採用難易度)\s*([A-Z])")
_COMPANY_TYPE = re.compile(r"日系|外資")
_CONSULTING_TYPE = re.compile(r"(?:総合|戦略|IT|業務)[ファーム]*")


def _bullets(text: str) -> list[str]:
    return [part.strip() for part in _BULLET_SPLIT.split(text) if part.strip()]


def empty_dossier(company_name: str) -> dict[str, Any]:
    return {
        "company_name": company_name,
        "public": {
            "basic_info": {
                "official_name": company_name,
                "founded": "",
                "headquarters": "",
                "employees": "",
                "business_description": "",
            },
            "work_style": {
                "work_format": "",
                "annual_holidays": "",
                "benefits": "",
            },
        },
        "confidential": {
            "selection_process": {},
            "recruitment_reality": {"characteristics": []},
            "internal_memo": {},
            "ng_items": {},
            "application_system": {},
            "contract_info": {},
            "target_details": {},
        },
    }


def parse_refund_policy(raw_text: str) -> dict[str, str]:
    """Refund tiers such as ``1ヶ月以内 100%`` keyed ``1_month``/``3_months``."""
    policy: dict[str, str] = {}
    for months, percent in _REFUND_TIER.findall(raw_text):
        key = f"{months}_month" if months == "1" else f"{months}_months"
        policy[key] = f"{percent}%"
    return policy


def _parse_contract(raw_text: str, contract: dict[str, Any]) -> None:
    if _CONTRACT_ACTIVE.search(raw_text):
        contract["contract_status"] = "契約有り"
    if match := _CONTRACT_PERIOD.search(raw_text):
        contract["contract_period"] = f"{match.group(1)} ~"
    if match := _COMMISSION.search(raw_text):
        contract["commission_rate"] = f"{match.group(1)}%"

    refund_policy = parse_refund_policy(raw_text)
    if refund_policy:
        contract["refund_policy"] = refund_policy

    if match := _EMAIL.search(raw_text):
        contract["email"] = match.group(1)
    if match := _URL.search(raw_text):
        contract["url"] = match.group(1)


def _parse_application_system(raw_text: str, lines: list[str], system: dict[str, Any]) -> None:
    if match := _ATS.search(raw_text):
        marker = match.group(0)
        ats_line = next((line for line in lines if marker in line), None)
        if ats_line:
            system["ats"] = ats_line.strip()
    if match := _APPLICATION_URL.search(raw_text):
        system["url"] = match.group(1)
    if match := _LOGIN_ID.search(raw_text):
        system["id"] = match.group(1)
    if match := _PASSWORD.search(raw_text):
        system["password"] = match.group(1)


def _parse_target_details(raw_text: str, target: dict[str, Any]) -> None:
    if match := _REQUIREMENTS.search(raw_text):
        target["requirements"] = _bullets(match.group(1))
    if match := _DIFFICULTY.search(raw_text):
        target["difficulty"] = match.group(1)
    if match := _COMPANY_TYPE.search(raw_text):
        target["company_type"] = match.group(0)
    if match := _CONSULTING_TYPE.search(raw_text):
        target["consulting_type"] = match.group(0)


def convert_raw_dossier(filename: str, raw_text: str) -> dict[str, Any]:
    """Parse one raw dossier.

    Args:
        filename: Source file name; the company name is the name without
            its ``.txt`` suffix.
        raw_text: File content.

    Returns:
        Dossier dict with ``company_name``, ``public`` and ``confidential``
        sections.
    """
    company_name = filename.removesuffix(RAW_SUFFIX)
    raw_text = normalize_text(raw_text)
    lines = raw_text.split("\n")

    result = empty_dossier(company_name)
    public = result["public"]
    confidential = result["confidential"]

    _parse_contract(raw_text, confidential["contract_info"])
    _parse_application_system(raw_text, lines, confidential["application_system"])

    characteristics: list[str] = []
    for quoted in _QUOTED.findall(raw_text):
        characteristics.extend(_bullets(quoted))
    if characteristics:
        confidential["recruitment_reality"]["characteristics"] = characteristics

    if match := _EMPLOYEES.search(raw_text):
        public["basic_info"]["employees"] = match.group(1)

    if "リモート" in raw_text or "フレックス" in raw_text:
        if match := _WORK_FORMAT.search(raw_text):
            public["work_style"]["work_format"] = match.group(0).strip()

    if match := _NG_NOTE.search(raw_text):
        confidential["ng_items"]["note"] = match.group(1).strip()

    _parse_target_details(raw_text, confidential["target_details"])

    return result


@dataclass
class ProcessResult:
    success: bool = True
    processed: int = 0
    errors: list[str] = field(default_factory=list)


def is_raw_dossier(path: Path) -> bool:
    """``.txt`` files and files without any extension."""
    return path.is_file() and (path.name.endswith(RAW_SUFFIX) or "." not in path.name)


def output_name(filename: str) -> str:
    if filename.endswith(RAW_SUFFIX):
        return filename[: -len(RAW_SUFFIX)] + ".json"
    return f"{filename}.json"


def process_directory(raw_dir: Path, processed_dir: Path) -> ProcessResult:
    """Convert every raw dossier in ``raw_dir`` into ``processed_dir``.

    A failing file is recorded and skipped. Failing to list the input or
    create the output directory is fatal and marks the result unsuccessful.
    """
    result = ProcessResult()

    try:
        processed_dir.mkdir(parents=True, exist_ok=True)
        sources = sorted(p for p in raw_dir.iterdir() if is_raw_dossier(p))
    except OSError as exc:
        logger.error(
            "dossier.process_failed",
            extra={"raw_dir": str(raw_dir), "error_type": type(exc).__name__},
        )
        result.success = False
        result.errors.append(f"Fatal error: {exc}")
        return result

    for source in sources:
        try:
            dossier = convert_raw_dossier(source.name, source.read_text(encoding="utf-8"))
            target = processed_dir / output_name(source.name)
            target.write_text(json.dumps(dossier, ensure_ascii=False, indent=2), encoding="utf-8")
            result.processed += 1
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(
                "dossier.file_failed",
                extra={"source_file": source.name, "error_type": type(exc).__name__},
            )
            result.errors.append(f"Error processing {source.name}: {exc}")

    logger.info(
        "dossier.processed",
        extra={"processed": result.processed, "failed": len(result.errors)},
    )
    return result
