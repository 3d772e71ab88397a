"""Route tests for dossier processing."""

import json
from pathlib import Path

from fastapi.testclient import TestClient

from app.core.config import settings


def _point_storage(monkeypatch, raw_dir: Path, processed_dir: Path) -> None:
    monkeypatch.setattr(settings.storage, "companies_raw_dir", raw_dir)
    monkeypatch.setattr(settings.storage, "companies_processed_dir", processed_dir)


def test_process_companies(client: TestClient, auth_headers, tmp_path: Path, monkeypatch) -> None:
    raw_dir = tmp_path / "raw"
    raw_dir.mkdir()
    (raw_dir / "Acme.txt").write_text("契約状況 契約有り\n難易度 A", encoding="utf-8")
    processed_dir = tmp_path / "processed"
    _point_storage(monkeypatch, raw_dir, processed_dir)

    response = client.post("/v1/admin/companies/process", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"success": True, "processed": 1, "errors": []}
    dossier = json.loads((processed_dir / "Acme.json").read_text(encoding="utf-8"))
    assert dossier["confidential"]["contract_info"]["contract_status"] == "契約有り"
    assert dossier["confidential"]["target_details"]["difficulty"] == "A"


def test_missing_raw_directory_returns_500(
    client: TestClient, auth_headers, tmp_path: Path, monkeypatch
) -> None:
    _point_storage(monkeypatch, tmp_path / "missing", tmp_path / "processed")

    response = client.post("/v1/admin/companies/process", headers=auth_headers)

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["processed"] == 0
    assert body["errors"][0].startswith("Fatal error:")


def test_requires_session(client: TestClient) -> None:
    assert client.post("/v1/admin/companies/process").status_code == 401
