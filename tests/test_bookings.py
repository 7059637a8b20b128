"""
tests/test_bookings.py
Booking endpoints: availability, credit checks, message link and the
admin-driven status progression.
"""

from urllib.parse import unquote

import pytest
from httpx import AsyncClient

from tests.conftest import TEACHER_PASSWORD, login, login_admin

DAY = "2026-01-10"


async def _top_up(client: AsyncClient, teacher_id: str, hours: float) -> None:
    admin = await login_admin(client)
    response = await client.post(
        f"/admin/teachers/{teacher_id}/top-up",
        json={"amount": 1000 * hours, "hours": hours},
        headers=admin,
    )
    assert response.status_code == 200, response.text


async def _book(client: AsyncClient, headers: dict, start_hour: int = 10, duration: int = 2, day: str = DAY):
    return await client.post(
        "/bookings",
        json={"date": day, "start_hour": start_hour, "duration": duration},
        headers=headers,
    )


@pytest.mark.asyncio
async def test_booking_requires_credits(client: AsyncClient, teacher_headers):
    response = await _book(client, teacher_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "INSUFFICIENT_CREDITS"

    mine = await client.get("/bookings", headers=teacher_headers)
    assert mine.json() == []


@pytest.mark.asyncio
async def test_create_booking(client: AsyncClient, teacher):
    await _top_up(client, teacher.id, 5)
    headers = await login(client, teacher.email, TEACHER_PASSWORD)

    response = await _book(client, headers)
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "Pending"
    assert data["cost"] == 1500
    assert data["start_time"] == 10
    assert data["duration"] == 2
    assert data["credits_remaining"] == 3

    assert data["message_link"].startswith("https://wa.me/94786398066?text=")
    text = unquote(data["message_link"].split("?text=", 1)[1])
    assert "Teacher: Nimal Perera" in text
    assert f"Date: {DAY}" in text
    assert "Time: 10:00" in text

    me = await client.get("/teachers/me", headers=headers)
    assert me.json()["credits"] == 3


@pytest.mark.asyncio
async def test_availability(client: AsyncClient, teacher):
    await _top_up(client, teacher.id, 5)
    headers = await login(client, teacher.email, TEACHER_PASSWORD)
    await _book(client, headers)

    response = await client.get("/bookings/availability", params={"date": DAY})
    assert response.status_code == 200
    slots = {s["hour"]: s["available"] for s in response.json()["slots"]}
    assert sorted(slots) == list(range(8, 24))
    assert slots[10] is False
    assert slots[11] is False
    assert slots[12] is True

    other_day = await client.get("/bookings/availability", params={"date": "2026-01-11"})
    assert all(s["available"] for s in other_day.json()["slots"])


@pytest.mark.asyncio
async def test_overlap_rejected(client: AsyncClient, teacher):
    await _top_up(client, teacher.id, 5)
    headers = await login(client, teacher.email, TEACHER_PASSWORD)
    assert (await _book(client, headers, 10, 2)).status_code == 201

    response = await _book(client, headers, 11, 1)
    assert response.status_code == 409
    assert response.json()["code"] == "SLOT_UNAVAILABLE"

    me = await client.get("/teachers/me", headers=headers)
    assert me.json()["credits"] == 3


@pytest.mark.asyncio
@pytest.mark.parametrize("start_hour, duration, status", [
    (7, 1, 422),
    (23, 2, 422),
    (10, 0, 422),
    (10, 6, 422),
])
async def test_invalid_slots(client: AsyncClient, teacher, start_hour, duration, status):
    await _top_up(client, teacher.id, 10)
    headers = await login(client, teacher.email, TEACHER_PASSWORD)
    response = await _book(client, headers, start_hour, duration)
    assert response.status_code == status


@pytest.mark.asyncio
async def test_past_slots_rejected(client: AsyncClient, teacher):
    # The studio clock is pinned to 2026-01-01 09:30
    await _top_up(client, teacher.id, 5)
    headers = await login(client, teacher.email, TEACHER_PASSWORD)

    yesterday = await _book(client, headers, 10, 1, day="2025-12-31")
    assert yesterday.status_code == 422
    assert yesterday.json()["code"] == "INVALID_SLOT"
    assert (await _book(client, headers, 9, 1, day="2026-01-01")).status_code == 422

    me = await client.get("/teachers/me", headers=headers)
    assert me.json()["credits"] == 5

    later_today = await _book(client, headers, 10, 1, day="2026-01-01")
    assert later_today.status_code == 201


@pytest.mark.asyncio
async def test_availability_marks_elapsed_hours(client: AsyncClient, portal):
    response = await client.get("/bookings/availability", params={"date": "2026-01-01"})
    slots = {s["hour"]: s["available"] for s in response.json()["slots"]}
    assert slots[8] is False
    assert slots[9] is False
    assert slots[10] is True

    past = await client.get("/bookings/availability", params={"date": "2025-12-31"})
    assert not any(s["available"] for s in past.json()["slots"])


@pytest.mark.asyncio
async def test_admin_cannot_book(client: AsyncClient):
    admin = await login_admin(client)
    assert (await _book(client, admin)).status_code == 403


@pytest.mark.asyncio
async def test_status_progression_and_cancel_refund(client: AsyncClient, teacher):
    await _top_up(client, teacher.id, 5)
    headers = await login(client, teacher.email, TEACHER_PASSWORD)
    booking_id = (await _book(client, headers)).json()["id"]

    admin = await login_admin(client)
    for status in ("Confirmed", "Packed/Ready"):
        response = await client.post(
            f"/admin/bookings/{booking_id}/status", json={"status": status}, headers=admin
        )
        assert response.status_code == 200
        assert response.json()["status"] == status

    response = await client.post(
        f"/admin/bookings/{booking_id}/status", json={"status": "Cancelled"}, headers=admin
    )
    assert response.json()["status"] == "Cancelled"

    teachers = (await client.get("/admin/teachers", headers=admin)).json()
    assert teachers[0]["credits"] == 5

    # Terminal
    response = await client.post(
        f"/admin/bookings/{booking_id}/status", json={"status": "Confirmed"}, headers=admin
    )
    assert response.status_code == 409
    assert response.json()["code"] == "ILLEGAL_TRANSITION"


@pytest.mark.asyncio
async def test_unknown_status_value(client: AsyncClient, teacher):
    await _top_up(client, teacher.id, 5)
    headers = await login(client, teacher.email, TEACHER_PASSWORD)
    booking_id = (await _book(client, headers)).json()["id"]

    admin = await login_admin(client)
    response = await client.post(
        f"/admin/bookings/{booking_id}/status", json={"status": "Shipped"}, headers=admin
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_admin_booking_filters(client: AsyncClient, teacher):
    await _top_up(client, teacher.id, 10)
    headers = await login(client, teacher.email, TEACHER_PASSWORD)
    first = (await _book(client, headers, 8, 1)).json()["id"]
    await _book(client, headers, 9, 1)
    await _book(client, headers, 8, 1, day="2026-01-11")

    admin = await login_admin(client)
    await client.post(f"/admin/bookings/{first}/status", json={"status": "Confirmed"}, headers=admin)

    all_bookings = (await client.get("/admin/bookings", headers=admin)).json()
    assert len(all_bookings) == 3

    by_day = (await client.get("/admin/bookings", params={"date": DAY}, headers=admin)).json()
    assert len(by_day) == 2

    confirmed = (await client.get("/admin/bookings", params={"status": "Confirmed"}, headers=admin)).json()
    assert [b["id"] for b in confirmed] == [first]

    bad = await client.get("/admin/bookings", params={"status": "Lost"}, headers=admin)
    assert bad.status_code == 400


@pytest.mark.asyncio
async def test_booking_state_persisted(client: AsyncClient, teacher, store):
    await _top_up(client, teacher.id, 5)
    headers = await login(client, teacher.email, TEACHER_PASSWORD)
    booking_id = (await _book(client, headers)).json()["id"]

    assert booking_id in store.snapshot()["dream_bookings"]
