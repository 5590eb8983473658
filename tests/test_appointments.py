from datetime import timedelta
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError

from dentistry_api.models import Appointment, Client
from dentistry_api.shared.dates import utc_now


@pytest.fixture
def patients(db):
    ana = Client(name="Ana Souza")
    bruno = Client(name="Bruno Lima")
    db.add_all([ana, bruno])
    db.commit()
    return ana, bruno


def add_appointment(db, client_id, start, hours=1, completed=False, cancelled=False):
    appointment = Appointment(
        client_id=client_id,
        start_time=start,
        end_time=start + timedelta(hours=hours),
        completed=completed,
        cancelled=cancelled,
    )
    db.add(appointment)
    db.commit()
    return appointment


@pytest.mark.asyncio
async def test_list_appointments_skips_cancelled_and_sorts(client, db, patients):
    ana, bruno = patients
    now = utc_now()
    later = add_appointment(db, ana.id, now + timedelta(days=2))
    earlier = add_appointment(db, bruno.id, now - timedelta(days=2), completed=True)
    add_appointment(db, ana.id, now + timedelta(days=1), cancelled=True)

    response = await client.get("/api/appointments")

    assert response.status_code == 200
    data = response.json()["data"]
    assert [a["id_agendamento"] for a in data] == [earlier.id, later.id]
    assert data[0]["clientName"] == "Bruno Lima"
    assert data[0]["finalizado"] is True
    assert data[1]["clientName"] == "Ana Souza"
    assert data[1]["cancelado"] is False


@pytest.mark.asyncio
async def test_appointment_of_missing_client_gets_placeholder_name(client, db):
    add_appointment(db, 42, utc_now() + timedelta(days=1))

    response = await client.get("/api/appointments")

    assert response.json()["data"][0]["clientName"] == "Cliente #42"


@pytest.mark.asyncio
async def test_upcoming_appointments_filters_and_limits(client, db, patients):
    ana, bruno = patients
    now = utc_now()
    add_appointment(db, ana.id, now - timedelta(days=1))
    add_appointment(db, ana.id, now + timedelta(days=1), completed=True)
    add_appointment(db, ana.id, now + timedelta(days=2), cancelled=True)
    first = add_appointment(db, bruno.id, now + timedelta(days=3))
    second = add_appointment(db, ana.id, now + timedelta(days=4))
    add_appointment(db, ana.id, now + timedelta(days=5))

    response = await client.get("/api/appointments/upcoming", params={"limit": 2})

    assert response.status_code == 200
    data = response.json()["data"]
    assert [a["id_agendamento"] for a in data] == [first.id, second.id]
    assert [a["clientName"] for a in data] == ["Bruno Lima", "Ana Souza"]


@pytest.mark.asyncio
async def test_upcoming_appointments_empty(client):
    response = await client.get("/api/appointments/upcoming")

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": []}


@pytest.mark.asyncio
async def test_upcoming_rejects_bad_limit(client):
    response = await client.get("/api/appointments/upcoming", params={"limit": 0})

    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_create_appointment(client, patients):
    ana, _ = patients

    response = await client.post(
        "/api/appointments",
        json={
            "id_cliente": ana.id,
            "hora_inicio": "2030-05-01T09:00:00-03:00",
            "hora_fim": "2030-05-01T10:00:00-03:00",
        },
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["clientName"] == "Ana Souza"
    assert data["hora_inicio"].startswith("2030-05-01T12:00:00")
    assert data["finalizado"] is False
    assert data["cancelado"] is False


@pytest.mark.asyncio
async def test_create_appointment_for_unknown_client(client):
    response = await client.post(
        "/api/appointments",
        json={
            "id_cliente": 999,
            "hora_inicio": "2030-05-01T09:00:00Z",
            "hora_fim": "2030-05-01T10:00:00Z",
        },
    )

    assert response.status_code == 404
    assert response.json()["message"] == "Client not found"


@pytest.mark.asyncio
async def test_create_appointment_rejects_inverted_interval(client, patients):
    ana, _ = patients

    response = await client.post(
        "/api/appointments",
        json={
            "id_cliente": ana.id,
            "hora_inicio": "2030-05-01T10:00:00Z",
            "hora_fim": "2030-05-01T09:00:00Z",
        },
    )

    assert response.status_code == 400
    assert "hora_fim must be after hora_inicio" in response.json()["error"]


@pytest.mark.asyncio
async def test_complete_and_cancel_appointment(client, db, patients):
    ana, _ = patients
    appointment = add_appointment(db, ana.id, utc_now() + timedelta(days=1))

    completed = await client.patch(
        f"/api/appointments/{appointment.id}", json={"finalizado": True}
    )
    assert completed.status_code == 200
    assert completed.json()["data"]["finalizado"] is True

    cancelled = await client.patch(
        f"/api/appointments/{appointment.id}", json={"cancelado": True}
    )
    assert cancelled.json()["data"]["cancelado"] is True

    listing = await client.get("/api/appointments")
    assert listing.json()["data"] == []


@pytest.mark.asyncio
async def test_reschedule_must_keep_end_after_start(client, db, patients):
    ana, _ = patients
    start = utc_now() + timedelta(days=1)
    appointment = add_appointment(db, ana.id, start)

    response = await client.patch(
        f"/api/appointments/{appointment.id}",
        json={"hora_inicio": (start + timedelta(hours=2)).isoformat()},
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_delete_appointment(client, db, patients):
    ana, _ = patients
    appointment = add_appointment(db, ana.id, utc_now())
    appointment_id = appointment.id

    response = await client.delete(f"/api/appointments/{appointment_id}")
    assert response.status_code == 200
    assert response.json()["message"] == "Appointment deleted"

    missing = await client.delete(f"/api/appointments/{appointment_id}")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_upcoming_appointments_when_database_is_down(client, broken_db):
    broken_db.query = Mock(
        side_effect=OperationalError("SELECT 1", {}, Exception("database is locked"))
    )

    response = await client.get("/api/appointments/upcoming")

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Error fetching upcoming appointments"
    assert "database is locked" in body["error"]


@pytest.mark.asyncio
async def test_create_appointment_rolls_back_when_commit_fails(client, patients, broken_db):
    ana, _ = patients
    broken_db.commit = Mock(
        side_effect=OperationalError("INSERT", {}, Exception("database is locked"))
    )

    response = await client.post(
        "/api/appointments",
        json={
            "id_cliente": ana.id,
            "hora_inicio": "2030-05-01T09:00:00Z",
            "hora_fim": "2030-05-01T10:00:00Z",
        },
    )

    assert response.status_code == 500
    assert response.json()["message"] == "Error creating appointment"
    assert broken_db.rollback.called
