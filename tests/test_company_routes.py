"""Route tests for company directory, dossiers and enrichment."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.deps import get_llm_client
from app.core.errors import LLMAppError
from conftest import FakeBackend, FakeLLM, make_job


@pytest.fixture
def seeded(fake_backend: FakeBackend) -> FakeBackend:
    fake_backend.tables["jobs"] = [
        make_job("1", company_name="Acme", industry_category="IT"),
        make_job("2", company_name="Acme", industry_category="IT"),
        make_job("3", company_name="Beta Bank", industry_category="金融"),
    ]
    fake_backend.tables["companies_master"] = [
        {
            "id": 1,
            "company_name": "Acme",
            "basic_info": {"official_name": "Acme株式会社"},
            "contract_info": {"commission_rate": "35%"},
        }
    ]
    return fake_backend


def test_list_companies(client: TestClient, seeded: FakeBackend, auth_headers) -> None:
    response = client.get("/v1/companies", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert {"name": "Acme", "industry": "IT", "size": "100-500", "job_count": 2} in data["companies"]


def test_list_companies_filters(client: TestClient, seeded: FakeBackend, auth_headers) -> None:
    response = client.get("/v1/companies", params={"industry": "金融"}, headers=auth_headers)

    assert [c["name"] for c in response.json()["companies"]] == ["Beta Bank"]


def test_company_dossier(client: TestClient, seeded: FakeBackend, auth_headers) -> None:
    response = client.get("/v1/companies/master/1", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["company"]["contract_info"]["commission_rate"] == "35%"
    assert data["needs_enrichment"] is True


def test_unknown_dossier(client: TestClient, seeded: FakeBackend, auth_headers) -> None:
    response = client.get("/v1/companies/master/42", headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "company_not_found"


def test_company_jobs(client: TestClient, seeded: FakeBackend, auth_headers) -> None:
    response = client.get("/v1/companies/Acme/jobs", headers=auth_headers)

    data = response.json()
    assert data["company_name"] == "Acme"
    assert data["total"] == 2
    assert [job["id"] for job in data["jobs"]] == ["2", "1"]


def test_company_named_master_lists_its_jobs(client: TestClient, seeded: FakeBackend, auth_headers) -> None:
    seeded.tables["jobs"].append(make_job("9", company_name="master"))

    response = client.get("/v1/companies/master/jobs", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["company_name"] == "master"
    assert [job["id"] for job in data["jobs"]] == ["9"]


def test_enrich_company(client: TestClient, seeded: FakeBackend, fake_llm: FakeLLM, auth_headers) -> None:
    response = client.post(
        "/v1/companies/enrich",
        json={"companyId": 1, "companyName": "Acme", "officialName": "Acme株式会社"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["official_name"] == "Acme株式会社"
    assert body["data"]["products"] == "CRM"
    assert "Acme株式会社" in fake_llm.calls[0]["prompt"]

    dossier = client.get("/v1/companies/master/1", headers=auth_headers).json()
    assert dossier["needs_enrichment"] is False


def test_enrich_accepts_snake_case(client: TestClient, seeded: FakeBackend, auth_headers) -> None:
    response = client.post(
        "/v1/companies/enrich",
        json={"company_id": "1", "company_name": "Acme"},
        headers=auth_headers,
    )

    assert response.status_code == 200


def test_enrich_requires_identity(client: TestClient, seeded: FakeBackend, auth_headers) -> None:
    response = client.post(
        "/v1/companies/enrich",
        json={"companyId": "", "companyName": "Acme"},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "company_identity_required"


def test_enrich_llm_failure_returns_500(
    test_app: FastAPI, client: TestClient, seeded: FakeBackend, auth_headers
) -> None:
    class BrokenLLM(FakeLLM):
        async def generate_json(self, prompt, *, system_prompt=None, **kwargs):
            raise LLMAppError(code="llm_invalid_json", message="The language model returned invalid JSON.")

    test_app.dependency_overrides[get_llm_client] = lambda: BrokenLLM()

    response = client.post(
        "/v1/companies/enrich",
        json={"companyId": 1, "companyName": "Acme"},
        headers=auth_headers,
    )

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "llm_invalid_json"
    assert seeded.tables["companies_master"][0]["basic_info"] == {"official_name": "Acme株式会社"}
