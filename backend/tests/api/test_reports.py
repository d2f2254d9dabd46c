"""Tests for sales report JSON endpoints and PDF download."""

from __future__ import annotations

from datetime import datetime, timezone
from io import BytesIO

import pytest
from httpx import AsyncClient
from pypdf import PdfReader

pytestmark = pytest.mark.asyncio


@pytest.fixture
def today():
    return datetime.now(timezone.utc).date()


async def _buy(client: AsyncClient, headers: dict, event: dict, quantity: int, paid: bool = True):
    vip = next(tt["id"] for tt in event["ticket_types"] if tt["name"] == "VIP")
    body = {"event_id": event["id"], "tickets": [{"ticket_type_id": vip, "quantity": quantity}]}
    if paid:
        body["payment"] = {"method": "card", "transaction_id": f"txn-{quantity}"}
    resp = await client.post("/api/v1/orders/", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def _assert_no_cache(resp) -> None:
    assert resp.headers["cache-control"] == "no-cache, no-store, must-revalidate"
    assert resp.headers["pragma"] == "no-cache"
    assert resp.headers["expires"] == "0"


class TestPeriodReports:
    async def test_daily(
        self, client: AsyncClient, auth_headers, organizer_headers, sample_event, today,
    ):
        await _buy(client, auth_headers, sample_event, 2)
        await _buy(client, auth_headers, sample_event, 3, paid=False)

        resp = await client.get("/api/v1/reports/daily", headers=organizer_headers)
        assert resp.status_code == 200
        _assert_no_cache(resp)
        data = resp.json()
        assert data["tickets_sold"] == 2
        assert data["revenue"] == 100.0
        assert data["date"] == today.isoformat()
        assert len(data["sales"]) == 24
        hour = datetime.now(timezone.utc).hour
        assert sum(h["count"] for h in data["sales"]) == 2
        # pending tickets still count against available seats
        assert data["occupancy_percentage"] == pytest.approx(5 / 110 * 100)
        assert data["sales"][hour]["count"] == 2

    async def test_weekly_and_monthly_shapes(
        self, client: AsyncClient, auth_headers, organizer_headers, sample_event, today,
    ):
        await _buy(client, auth_headers, sample_event, 1)

        weekly = (await client.get(
            "/api/v1/reports/weekly", params={"date": today.isoformat()}, headers=organizer_headers,
        )).json()
        assert [d["day"] for d in weekly["sales"]][0] == "Monday"
        assert len(weekly["sales"]) == 7
        assert weekly["sales"][today.weekday()]["amount"] == 50.0

        monthly = (await client.get(
            "/api/v1/reports/monthly", params={"date": today.isoformat()}, headers=organizer_headers,
        )).json()
        assert monthly["month"] == today.month
        assert monthly["year"] == today.year
        assert monthly["sales"][today.day - 1]["count"] == 1

    async def test_empty_period(self, client: AsyncClient, organizer_headers, sample_event):
        resp = await client.get(
            "/api/v1/reports/daily", params={"date": "2020-01-01"}, headers=organizer_headers,
        )
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Insufficient data for the selected period."

    async def test_all_time_without_orders(self, client: AsyncClient, organizer_headers):
        resp = await client.get("/api/v1/reports/all", headers=organizer_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["tickets_sold"] == 0
        assert data["revenue"] == 0
        assert data["total_orders"] == 0
        assert data["orders"] == []

    async def test_all_time(
        self, client: AsyncClient, auth_headers, organizer_headers, sample_event, today,
    ):
        await _buy(client, auth_headers, sample_event, 2)
        await _buy(client, auth_headers, sample_event, 1, paid=False)

        data = (await client.get("/api/v1/reports/all", headers=organizer_headers)).json()
        assert data["total_orders"] == 2
        assert data["confirmed_orders"] == 1
        assert list(data["orders_by_date"]) == [today.isoformat()]
        summary = data["event_summary"][0]
        assert summary["name"] == "Jazz Night"
        assert summary["tickets_sold"] == 2
        assert summary["event_id"] == sample_event["id"]


class TestReportAccess:
    async def test_buyers_are_forbidden(self, client: AsyncClient, auth_headers):
        resp = await client.get("/api/v1/reports/all", headers=auth_headers)
        assert resp.status_code == 403

    async def test_other_organizers_event(self, client: AsyncClient, sample_event):
        other = await client.post(
            "/api/v1/auth/register/organizer",
            json={"email": "rival@ticketdesk.dev", "password": "RivalPass1",
                  "organization_name": "Rivals"},
        )
        headers = {"Authorization": f"Bearer {other.json()['access_token']}"}
        resp = await client.get(
            "/api/v1/reports/all", params={"event_id": sample_event["id"]}, headers=headers,
        )
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Event not found"

    async def test_admin_sees_every_event(
        self, client: AsyncClient, auth_headers, admin_headers, sample_event,
    ):
        await _buy(client, auth_headers, sample_event, 1)
        data = (await client.get("/api/v1/reports/all", headers=admin_headers)).json()
        assert data["tickets_sold"] == 1


class TestDownload:
    async def test_daily_pdf(
        self, client: AsyncClient, auth_headers, organizer_headers, sample_event, today,
    ):
        await _buy(client, auth_headers, sample_event, 2)
        resp = await client.get(
            "/api/v1/reports/download", params={"type": "daily"}, headers=organizer_headers,
        )
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert resp.headers["content-disposition"] == (
            f'attachment; filename="daily-report-{today:%Y-%m-%d}.pdf"'
        )
        _assert_no_cache(resp)
        assert resp.content.startswith(b"%PDF")

        text = PdfReader(BytesIO(resp.content)).pages[0].extract_text()
        assert "Total Tickets Sold: 2" in text
        assert "Revenue: RM 100.00" in text

    async def test_all_time_pdf(self, client: AsyncClient, organizer_headers, today):
        resp = await client.get(
            "/api/v1/reports/download", params={"type": "all"}, headers=organizer_headers,
        )
        assert resp.status_code == 200
        assert f"all-time-report-{today:%Y-%m-%d}.pdf" in resp.headers["content-disposition"]

    async def test_empty_period_pdf(self, client: AsyncClient, organizer_headers):
        resp = await client.get(
            "/api/v1/reports/download", params={"type": "monthly", "date": "2020-02-10"},
            headers=organizer_headers,
        )
        assert resp.status_code == 404

    async def test_unknown_type(self, client: AsyncClient, organizer_headers):
        resp = await client.get(
            "/api/v1/reports/download", params={"type": "yearly"}, headers=organizer_headers,
        )
        assert resp.status_code == 422

    async def test_rate_limited(self, client: AsyncClient, organizer_headers):
        codes = []
        for _ in range(6):
            resp = await client.get(
                "/api/v1/reports/download", params={"type": "all"}, headers=organizer_headers,
            )
            codes.append(resp.status_code)
        assert codes == [200] * 5 + [429]
