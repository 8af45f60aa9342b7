"""Integration tests for the timed break lifecycle over HTTP."""

from datetime import UTC, datetime, timedelta

import pytest


def _auth(user_id: str) -> dict[str, str]:
    return {"X-User-Id": user_id}


@pytest.fixture
async def box_break(client, register) -> str:
    await register("brock")
    for user_id in ("ash", "misty", "gary"):
        await register(user_id, deposit_cents=10_000)
    resp = await client.post(
        "/api/v1/listings",
        json={
            "type": "TIMED_BREAK",
            "title": "151 Booster Box Break",
            "price_cents": 2_500,
            "category": "SEALED_PRODUCT",
            "target_participants": 2,
        },
        headers=_auth("brock"),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["id"]


async def _status(client, listing_id: str) -> str:
    resp = await client.get(f"/api/v1/listings/{listing_id}")
    return resp.json()["data"]["timed_break"]["status"]


class TestBreakLifecycle:
    async def test_fill_schedule_go_live_complete(self, client, box_break):
        base = f"/api/v1/breaks/{box_break}"

        ash = await client.post(f"{base}/join", headers=_auth("ash"))
        misty = await client.post(f"{base}/join", headers=_auth("misty"))
        gary = await client.post(f"{base}/join", headers=_auth("gary"))

        assert ash.json()["message"] == "Spot secured (Funds Authorized)"
        assert misty.json()["message"] == "Spot secured! Break is now FULL."
        assert gary.status_code == 409
        assert gary.json()["data"] == {"reason": "BREAK_FULL"}
        assert await _status(client, box_break) == "FULL_PENDING_SCHEDULE"

        when = (datetime.now(UTC) + timedelta(hours=2)).isoformat()
        scheduled = await client.post(
            f"{base}/schedule",
            json={"scheduled_live_at": when, "live_link": "https://live.example/151"},
            headers=_auth("brock"),
        )
        assert scheduled.status_code == 200
        assert await _status(client, box_break) == "SCHEDULED"

        started = await client.post(f"{base}/start", headers=_auth("brock"))
        assert started.status_code == 200

        spin = await client.post(
            f"{base}/events",
            json={"type": "WHEEL_SPIN", "payload": {"result": "ash"}},
            headers=_auth("brock"),
        )
        assert spin.status_code == 200

        done = await client.post(
            f"{base}/complete",
            json={"results_media": ["https://img.example/1.jpg"], "results_notes": "SIR pull"},
            headers=_auth("brock"),
        )
        assert done.json()["data"] == {"charged": 2, "failed": 0}
        assert await _status(client, box_break) == "COMPLETED"

        events = (await client.get(f"{base}/events")).json()["data"]
        assert [e["type"] for e in events] == ["BREAK_START", "WHEEL_SPIN", "BREAK_END"]
        entries = (await client.get(f"{base}/entries")).json()["data"]
        assert {e["status"] for e in entries} == {"CHARGED"}
        balance = await client.get("/api/v1/wallet/balance", headers=_auth("ash"))
        assert balance.json()["data"]["balance_cents"] == 7_500

    async def test_only_host_can_start(self, client, box_break):
        base = f"/api/v1/breaks/{box_break}"
        await client.post(f"{base}/join", headers=_auth("ash"))
        await client.post(f"{base}/join", headers=_auth("misty"))

        resp = await client.post(f"{base}/start", headers=_auth("ash"))

        assert resp.status_code == 403

    async def test_leave_reopens_break(self, client, box_break):
        base = f"/api/v1/breaks/{box_break}"
        joined = await client.post(f"{base}/join", headers=_auth("ash"))
        await client.post(f"{base}/join", headers=_auth("misty"))
        entry_id = joined.json()["data"]["entry_id"]

        resp = await client.delete(f"/api/v1/breaks/entries/{entry_id}", headers=_auth("ash"))

        assert resp.json()["message"] == "Removed"
        assert await _status(client, box_break) == "OPEN"

    async def test_cancel_releases_holds(self, client, box_break):
        base = f"/api/v1/breaks/{box_break}"
        await client.post(f"{base}/join", headers=_auth("ash"))

        resp = await client.post(f"{base}/cancel", headers=_auth("brock"))

        assert resp.status_code == 200
        assert await _status(client, box_break) == "CANCELLED"
        inbox = (await client.get("/api/v1/notifications", headers=_auth("ash"))).json()
        assert inbox["data"]["items"][0]["title"] == "Break Cancelled"


class TestWaitlist:
    async def test_positions(self, client, box_break):
        base = f"/api/v1/breaks/{box_break}/waitlist"

        await client.post(base, headers=_auth("gary"))
        joined = await client.post(base, headers=_auth("misty"))
        gary = await client.get(f"{base}/position", headers=_auth("gary"))
        ash = await client.get(f"{base}/position", headers=_auth("ash"))

        assert joined.json()["data"]["position"] == 2
        assert gary.json()["data"]["position"] == 1
        assert ash.json()["data"]["position"] == -1

        await client.delete(base, headers=_auth("gary"))
        misty = await client.get(f"{base}/position", headers=_auth("misty"))
        assert misty.json()["data"]["position"] == 1
