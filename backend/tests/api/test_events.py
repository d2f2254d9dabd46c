"""Tests for event, ticket type and seat map endpoints."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


def _ticket_type(event: dict, name: str) -> dict:
    return next(tt for tt in event["ticket_types"] if tt["name"] == name)


class TestCreateEvent:
    async def test_create(self, client: AsyncClient, sample_event):
        assert sample_event["name"] == "Jazz Night"
        assert sample_event["total_seats"] == 110
        assert sample_event["available_seats"] == 110
        assert sample_event["published"] is True
        assert {tt["name"] for tt in sample_event["ticket_types"]} == {"VIP", "Standing"}
        assert _ticket_type(sample_event, "VIP")["seat_arrangement"]["rows"] == 3
        assert sample_event["promotional_offers"][0]["code"] == "EARLY20"

    async def test_buyer_cannot_create(self, client: AsyncClient, auth_headers, event_payload_factory):
        resp = await client.post("/api/v1/events/", json=event_payload_factory(), headers=auth_headers)
        assert resp.status_code == 403

    async def test_requires_ticket_types(
        self, client: AsyncClient, organizer_headers, event_payload_factory,
    ):
        resp = await client.post(
            "/api/v1/events/", json=event_payload_factory(ticket_types=[]), headers=organizer_headers,
        )
        assert resp.status_code == 422

    async def test_date_must_be_in_future(
        self, client: AsyncClient, organizer_headers, event_payload_factory,
    ):
        past = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
        resp = await client.post(
            "/api/v1/events/", json=event_payload_factory(date=past), headers=organizer_headers,
        )
        assert resp.status_code == 422

    async def test_quantity_must_match_arrangement(
        self, client: AsyncClient, organizer_headers, event_payload_factory,
    ):
        body = event_payload_factory(ticket_types=[{
            "name": "VIP", "price": 10, "quantity": 12,
            "seat_arrangement": {"rows": 3, "columns": 4, "last_row_columns": 2},
        }])
        resp = await client.post("/api/v1/events/", json=body, headers=organizer_headers)
        assert resp.status_code == 422

    async def test_offer_window_must_be_ordered(
        self, client: AsyncClient, organizer_headers, event_payload_factory,
    ):
        now = datetime.now(timezone.utc)
        body = event_payload_factory(promotional_offers=[{
            "name": "Backwards", "code": "BACK", "discount_type": "fixed", "discount_value": 5,
            "valid_from": (now + timedelta(days=2)).isoformat(),
            "valid_until": now.isoformat(),
        }])
        resp = await client.post("/api/v1/events/", json=body, headers=organizer_headers)
        assert resp.status_code == 422

    async def test_bad_time_format(self, client: AsyncClient, organizer_headers, event_payload_factory):
        resp = await client.post(
            "/api/v1/events/", json=event_payload_factory(time="7pm"), headers=organizer_headers,
        )
        assert resp.status_code == 422


class TestListEvents:
    async def test_lists_published_only(
        self, client: AsyncClient, organizer_headers, event_payload_factory, sample_event,
    ):
        await client.post(
            "/api/v1/events/",
            json=event_payload_factory(name="Secret Rehearsal", published=False),
            headers=organizer_headers,
        )
        resp = await client.get("/api/v1/events/")
        assert resp.status_code == 200
        data = resp.json()
        assert data["total"] == 1
        assert [e["name"] for e in data["items"]] == ["Jazz Night"]

        mine = await client.get("/api/v1/events/mine", headers=organizer_headers)
        assert {e["name"] for e in mine.json()} == {"Jazz Night", "Secret Rehearsal"}

    async def test_search_and_paging(
        self, client: AsyncClient, organizer_headers, event_payload_factory,
    ):
        for name in ("Rock Fest", "Jazz Brunch", "Jazz Night"):
            await client.post(
                "/api/v1/events/", json=event_payload_factory(name=name), headers=organizer_headers,
            )
        resp = await client.get("/api/v1/events/", params={"search": "jazz", "limit": 1, "page": 2})
        data = resp.json()
        assert data["total"] == 2
        assert data["page"] == 2
        assert len(data["items"]) == 1
        assert "Jazz" in data["items"][0]["name"]

    async def test_unpublished_event_is_hidden(
        self, client: AsyncClient, organizer_headers, event_payload_factory,
    ):
        resp = await client.post(
            "/api/v1/events/", json=event_payload_factory(published=False), headers=organizer_headers,
        )
        event_id = resp.json()["id"]
        assert (await client.get(f"/api/v1/events/{event_id}")).status_code == 404


class TestUpdateDeleteEvent:
    async def test_owner_can_update(self, client: AsyncClient, organizer_headers, sample_event):
        resp = await client.patch(
            f"/api/v1/events/{sample_event['id']}",
            json={"location": "Istana Budaya", "time": "20:00"},
            headers=organizer_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["location"] == "Istana Budaya"
        assert resp.json()["time"] == "20:00"
        assert resp.json()["name"] == "Jazz Night"

    async def test_other_organizer_cannot_update(self, client: AsyncClient, sample_event):
        other = await client.post(
            "/api/v1/auth/register/organizer",
            json={"email": "rival@ticketdesk.dev", "password": "RivalPass1",
                  "organization_name": "Rivals"},
        )
        headers = {"Authorization": f"Bearer {other.json()['access_token']}"}
        resp = await client.patch(
            f"/api/v1/events/{sample_event['id']}", json={"name": "Mine now"}, headers=headers,
        )
        assert resp.status_code == 403

    async def test_admin_can_delete(self, client: AsyncClient, admin_headers, sample_event):
        resp = await client.delete(f"/api/v1/events/{sample_event['id']}", headers=admin_headers)
        assert resp.status_code == 204
        assert (await client.get(f"/api/v1/events/{sample_event['id']}")).status_code == 404

    async def test_buyer_cannot_delete(self, client: AsyncClient, auth_headers, sample_event):
        resp = await client.delete(f"/api/v1/events/{sample_event['id']}", headers=auth_headers)
        assert resp.status_code == 403


class TestSeatMap:
    async def test_full_seat_map(self, client: AsyncClient, sample_event):
        resp = await client.get(f"/api/v1/events/{sample_event['id']}/seats")
        assert resp.status_code == 200
        seats = resp.json()["seats"]
        # only the VIP ticket type has assigned seating
        assert len(seats) == 10
        assert [s["id"] for s in seats[:5]] == ["A1", "A2", "A3", "A4", "B1"]
        assert seats[-1]["id"] == "C2"
        assert all(s["status"] == "available" and s["price"] == 50.0 for s in seats)

    async def test_ticket_type_seat_map(self, client: AsyncClient, sample_event):
        vip = _ticket_type(sample_event, "VIP")
        standing = _ticket_type(sample_event, "Standing")
        base = f"/api/v1/events/{sample_event['id']}/tickets"

        resp = await client.get(f"{base}/{vip['id']}/seats")
        assert {s["ticket_type_id"] for s in resp.json()["seats"]} == {vip["id"]}

        resp = await client.get(f"{base}/{standing['id']}/seats")
        assert resp.json()["seats"] == []

    async def test_unknown_ticket_type(self, client: AsyncClient, sample_event):
        resp = await client.get(
            f"/api/v1/events/{sample_event['id']}/tickets/00000000-0000-0000-0000-000000000000/seats"
        )
        assert resp.status_code == 404

    async def test_list_ticket_types(self, client: AsyncClient, sample_event):
        resp = await client.get(f"/api/v1/events/{sample_event['id']}/tickets")
        assert resp.status_code == 200
        assert {tt["name"] for tt in resp.json()} == {"VIP", "Standing"}
