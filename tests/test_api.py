"""
Integration tests for the HTTP API.
"""
import pytest

from ratiolens.api.routes import analyze as analyze_routes
from ratiolens.config import get_settings
from ratiolens.services.industry_service import NO_INDUSTRY_DESCRIPTION, describe_okved_fallback
from ratiolens.services.template_service import TEMPLATE_FILENAME, XLSX_CONTENT_TYPE, build_sample_template


def upload(client, filename, content, content_type):
    return client.post("/api/v1/analyze", files={"file": (filename, content, content_type)})


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert isinstance(data["llm_configured"], bool)

    def test_correlation_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Correlation-ID": "test-123"})
        assert response.headers["X-Correlation-ID"] == "test-123"

    def test_correlation_id_is_generated(self, client):
        response = client.get("/api/v1/analyses")
        assert response.headers["X-Correlation-ID"]


class TestAnalyze:
    def test_analyze_template(self, client):
        response = upload(client, "template.xlsx", build_sample_template(), XLSX_CONTENT_TYPE)

        assert response.status_code == 200
        data = response.json()
        assert data["filename"] == "template.xlsx"
        assert data["data"]["total_liabilities"] == 120000.0
        assert data["data"]["revenue"] == 500000.0
        assert data["ratios"]["current_ratio"]["status"] == "excellent"
        assert data["ratios"]["roa"]["value"] == pytest.approx(0.15)
        assert data["equity_maneuverability"] == pytest.approx(1 / 6)
        assert data["balance_check"]["is_balanced"] is True
        assert data["sector_description"] == NO_INDUSTRY_DESCRIPTION
        assert data["report"]["risk_level"] == "low"
        assert data["report"]["source"] == "rules"
        assert data["warnings"] == []

    def test_analyze_text_document(self, client, statement_lines):
        content = "\n".join(statement_lines).encode("utf-8")

        response = upload(client, "balance.txt", content, "text/plain")

        assert response.status_code == 200
        data = response.json()
        assert data["okved"] == "47.11"
        assert data["company_name"] == 'ООО "Ромашка"'
        assert data["sector_description"] == describe_okved_fallback("47.11")
        assert "roa" not in data["ratios"]

    def test_analysis_runs_in_threadpool(self, client, monkeypatch):
        calls = []

        async def recording_threadpool(func, *args):
            calls.append(func.__name__)
            return func(*args)

        monkeypatch.setattr(analyze_routes, "run_in_threadpool", recording_threadpool)

        response = upload(client, "template.xlsx", build_sample_template(), XLSX_CONTENT_TYPE)

        assert response.status_code == 200
        assert calls == ["analyze_document"]

    def test_imbalance_is_returned_as_warning(self, client):
        content = (
            "Показатель;Значение\n"
            "Оборотные активы;150000\nДенежные средства;45000\nКраткосрочные инвестиции;20000\n"
            "Дебиторская задолженность;50000\nЗапасы;35000\nВсего активов;400000\n"
            "Краткосрочные обязательства;60000\nКраткосрочный долг;15000\nВсего обязательств;120000\n"
            "Собственный капитал;180000\nДолгосрочный долг;60000\n"
        ).encode("utf-8")

        response = upload(client, "balance.csv", content, "text/csv")

        assert response.status_code == 200
        data = response.json()
        assert data["balance_check"]["is_balanced"] is False
        assert [w["event"] for w in data["warnings"]] == ["balance_mismatch"]

    def test_invalid_file_type(self, client):
        response = upload(client, "scan.png", b"\x89PNG", "image/png")

        assert response.status_code == 400
        data = response.json()
        assert data["error_code"] == "RL-103"
        assert ".xlsx" in data["details"]["expected_types"]

    def test_file_too_large(self, client, monkeypatch):
        monkeypatch.setenv("MAX_UPLOAD_SIZE_MB", "0")
        get_settings.cache_clear()

        response = upload(client, "balance.txt", b"x", "text/plain")

        assert response.status_code == 413
        assert response.json()["error_code"] == "RL-104"

    def test_missing_required_field(self, client):
        response = upload(client, "balance.txt", "Запасы 1210 35000".encode("utf-8"), "text/plain")

        assert response.status_code == 422
        data = response.json()
        assert data["error_code"] == "RL-201"
        assert data["details"]["field"] == "current_assets"
        assert data["details"]["found_labels"] == ["Запасы"]

    def test_empty_document(self, client):
        response = upload(client, "empty.txt", b"   \n  ", "text/plain")

        assert response.status_code == 422
        assert response.json()["error_code"] == "RL-102"

    def test_corrupt_spreadsheet(self, client):
        response = upload(client, "broken.xlsx", b"not a workbook", XLSX_CONTENT_TYPE)

        assert response.status_code == 422
        assert response.json()["error_code"] == "RL-101"


class TestStoredAnalyses:
    def test_get_and_list(self, client):
        created = upload(client, "template.xlsx", build_sample_template(), XLSX_CONTENT_TYPE).json()

        fetched = client.get(f"/api/v1/analyses/{created['id']}")
        listed = client.get("/api/v1/analyses")

        assert fetched.status_code == 200
        assert fetched.json()["ratios"] == created["ratios"]
        assert listed.json()["count"] == 1
        assert listed.json()["results"][0]["id"] == created["id"]
        assert listed.json()["results"][0]["risk_level"] == "low"

    def test_unknown_analysis(self, client):
        response = client.get("/api/v1/analyses/does-not-exist")

        assert response.status_code == 404
        assert response.json()["error_code"] == "RL-300"


class TestTemplateDownload:
    def test_download(self, client):
        response = client.get("/api/v1/template")

        assert response.status_code == 200
        assert response.headers["content-type"] == XLSX_CONTENT_TYPE
        assert TEMPLATE_FILENAME in response.headers["content-disposition"]
        assert response.content[:2] == b"PK"
