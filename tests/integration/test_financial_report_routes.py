"""Integration tests for financial report endpoints."""

from typing import Any

from fastapi.testclient import TestClient

from tests.conftest import ADMIN_ID, BOARD_MEMBER_ID, OBSERVER_ID, OWNER_ID, auth_headers
from tests.fakes import FakeSupabaseClient

REPORT = {"type": "PROFIT_LOSS", "fiscal_year": 2026, "period": "Q1", "data": {"revenue": 1200, "costs": 900}}


def _url(board: dict[str, Any]) -> str:
    return f"/api/v1/companies/{board['company']['id']}/financial-reports"


class TestCreate:
    """Tests for creating and listing reports."""

    def test_requires_data_or_file(self, client: TestClient, board: dict[str, Any]) -> None:
        response = client.post(
            _url(board),
            json={"type": "BALANCE_SHEET", "fiscal_year": 2026, "period": "Q1"},
            headers=auth_headers(OWNER_ID),
        )

        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"

    def test_file_only_report(self, client: TestClient, board: dict[str, Any]) -> None:
        response = client.post(
            _url(board),
            json={"type": "CASH_FLOW", "fiscal_year": 2025, "period": "FY", "storage_key": "acme/cash-2025.pdf"},
            headers=auth_headers(BOARD_MEMBER_ID),
        )

        assert response.status_code == 201
        assert response.json()["status"] == "DRAFT"
        assert response.json()["data"] is None

    def test_list_latest_year_first_with_filters(self, client: TestClient, board: dict[str, Any]) -> None:
        headers = auth_headers(ADMIN_ID)
        client.post(_url(board), json={**REPORT, "fiscal_year": 2024}, headers=headers)
        client.post(_url(board), json=REPORT, headers=headers)
        client.post(_url(board), json={**REPORT, "type": "BUDGET_VS_ACTUAL", "period": "Q2"}, headers=headers)

        listed = client.get(_url(board), headers=auth_headers(OBSERVER_ID)).json()
        assert [r["fiscal_year"] for r in listed] == [2026, 2026, 2024]

        q2 = client.get(_url(board), params={"period": "Q2"}, headers=auth_headers(OBSERVER_ID)).json()
        assert [r["type"] for r in q2] == ["BUDGET_VS_ACTUAL"]

        pnl = client.get(
            _url(board), params={"report_type": "PROFIT_LOSS", "fiscal_year": 2024}, headers=headers
        ).json()
        assert len(pnl) == 1
        assert pnl[0]["data"] == {"revenue": 1200, "costs": 900}

    def test_observer_cannot_create(self, client: TestClient, board: dict[str, Any]) -> None:
        response = client.post(_url(board), json=REPORT, headers=auth_headers(OBSERVER_ID))

        assert response.status_code == 403


class TestFinalize:
    """Tests for the draft to final lifecycle."""

    def test_final_report_is_read_only(
        self, client: TestClient, board: dict[str, Any], fake_db: FakeSupabaseClient
    ) -> None:
        headers = auth_headers(BOARD_MEMBER_ID)
        report = client.post(_url(board), json=REPORT, headers=headers).json()
        url = f"{_url(board)}/{report['id']}"

        edited = client.put(url, json={"data": {"revenue": 1300, "costs": 900}}, headers=headers)
        assert edited.json()["data"]["revenue"] == 1300

        filed = client.put(f"{url}/file", json={"storage_key": "acme/pnl-q1.pdf"}, headers=headers)
        assert filed.json()["storage_key"] == "acme/pnl-q1.pdf"

        final = client.post(f"{url}/finalize", headers=headers)
        assert final.json()["status"] == "FINAL"

        assert client.put(url, json={"period": "Q2"}, headers=headers).status_code == 409
        assert client.put(f"{url}/file", json={"storage_key": "x.pdf"}, headers=headers).status_code == 409
        assert client.post(f"{url}/finalize", headers=headers).status_code == 409
        assert client.delete(url, headers=auth_headers(OWNER_ID)).status_code == 409
        assert len(fake_db.rows("financial_reports")) == 1

    def test_delete_draft(self, client: TestClient, board: dict[str, Any], fake_db: FakeSupabaseClient) -> None:
        report = client.post(_url(board), json=REPORT, headers=auth_headers(OWNER_ID)).json()

        response = client.delete(f"{_url(board)}/{report['id']}", headers=auth_headers(OWNER_ID))

        assert response.status_code == 204
        assert fake_db.rows("financial_reports") == []

    def test_report_from_another_company_is_not_found(
        self, client: TestClient, board: dict[str, Any], fake_db: FakeSupabaseClient
    ) -> None:
        other = fake_db.seed("companies", {"name": "Other Co"})[0]
        report = fake_db.seed(
            "financial_reports",
            {"company_id": other["id"], "type": "CUSTOM", "fiscal_year": 2026, "period": "Q1", "status": "DRAFT"},
        )[0]

        response = client.get(f"{_url(board)}/{report['id']}", headers=auth_headers(OWNER_ID))

        assert response.status_code == 404
