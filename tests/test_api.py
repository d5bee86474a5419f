"""HTTP tests driving the FastAPI app over an in-memory SQLite database."""

from datetime import timedelta
from uuid import uuid4

import httpx
import pytest

from supportdesk.config import EscalationTier, Priority, TicketStatus
from supportdesk.core import utcnow
from supportdesk.infrastructure.database import get_session
from supportdesk.main import app
from supportdesk.tickets.domain import Ticket
from supportdesk.tickets.infrastructure import SQLAlchemyTicketRepository

ADMIN = {"X-Actor-Id": "admin-1", "X-Actor-Role": "ADMIN"}
SUPERVISOR = {"X-Actor-Id": "supervisor-1", "X-Actor-Role": "SUPERVISOR"}


@pytest.fixture
async def api(session_maker):
    async def override_get_session():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


async def create_client(api, category="NORMAL"):
    response = await api.post(
        "/clients",
        json={"name": "Acme Corp", "email": f"{uuid4().hex[:8]}@acme.example", "category": category},
        headers=ADMIN,
    )
    assert response.status_code == 201
    return response.json()


async def create_agent(api, level="TIER_1"):
    key = uuid4().hex[:8]
    response = await api.post(
        "/agents",
        json={"name": f"Agent {key}", "email": f"{key}@support.example", "user_id": f"user-{key}", "level": level},
        headers=ADMIN,
    )
    assert response.status_code == 201
    return response.json()


async def create_ticket(api, client_id, agent_id=None):
    payload = {"title": "Cannot log in", "description": "Login fails with 500", "client_id": client_id}
    if agent_id:
        payload["agent_id"] = agent_id
    response = await api.post("/tickets", json=payload, headers=SUPERVISOR)
    assert response.status_code == 201
    return response.json()


def as_agent(agent):
    return {"X-Actor-Id": agent["user_id"], "X-Actor-Role": "AGENT"}


# =============================================================================
# Actor headers and error bodies
# =============================================================================

async def test_missing_actor_headers_is_unauthenticated(api):
    response = await api.get("/tickets")

    assert response.status_code == 401
    body = response.json()
    assert body["error_type"] == "unauthenticated"
    assert body["correlation_id"]


async def test_unknown_role_is_forbidden(api):
    response = await api.get("/tickets", headers={"X-Actor-Id": "x", "X-Actor-Role": "JANITOR"})

    assert response.status_code == 403


async def test_correlation_id_is_echoed(api):
    response = await api.get("/tickets", headers={**ADMIN, "X-Correlation-ID": "abc-123"})

    assert response.headers["X-Correlation-ID"] == "abc-123"


async def test_schema_errors_are_422(api):
    response = await api.post("/tickets", json={"title": "x"}, headers=ADMIN)

    assert response.status_code == 422
    body = response.json()
    assert body["error_type"] == "request_validation"
    assert isinstance(body["detail"], list)


async def test_health(api):
    response = await api.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


# =============================================================================
# Clients
# =============================================================================

async def test_agent_cannot_create_client(api):
    agent = await create_agent(api)

    response = await api.post(
        "/clients",
        json={"name": "Acme Corp", "email": "ops@acme.example"},
        headers=as_agent(agent),
    )

    assert response.status_code == 403


async def test_client_with_tickets_cannot_be_deleted(api):
    client = await create_client(api)
    await create_ticket(api, client["id"])

    response = await api.delete(f"/clients/{client['id']}", headers=ADMIN)
    assert response.status_code == 409

    response = await api.delete(f"/clients/{client['id']}", headers=SUPERVISOR)
    assert response.status_code == 403


async def test_list_clients_with_counts(api):
    client = await create_client(api, "VIP")
    await create_ticket(api, client["id"])

    response = await api.get("/clients", headers=SUPERVISOR)

    assert response.status_code == 200
    body = response.json()
    assert body["data"][0]["ticket_count"] == 1
    assert body["pagination"]["total_items"] == 1


async def test_duplicate_client_email_is_409(api):
    client = await create_client(api)

    response = await api.post(
        "/clients",
        json={"name": "Copycat", "email": client["email"]},
        headers=ADMIN,
    )

    assert response.status_code == 409
    assert response.json()["error_type"] == "conflict"


# =============================================================================
# Tickets
# =============================================================================

async def test_ticket_lifecycle(api):
    client = await create_client(api, "VIP")
    agent = await create_agent(api)

    ticket = await create_ticket(api, client["id"])
    assert ticket["status"] == "OPEN"
    assert ticket["priority"] == "HIGH"
    assert ticket["escalation_tier"] == "TIER_1"
    assert ticket["client"]["category"] == "VIP"

    response = await api.put(
        f"/tickets/{ticket['id']}",
        json={"agent_id": agent["id"], "status": "IN_PROGRESS"},
        headers=SUPERVISOR,
    )
    assert response.status_code == 200
    assert response.json()["agent"]["id"] == agent["id"]

    response = await api.put(
        f"/tickets/{ticket['id']}", json={"status": "RESOLVED"}, headers=as_agent(agent)
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "RESOLVED"
    assert body["resolved_at"] is not None
    assert body["resolution_minutes"] >= 0


async def test_invalid_transition_is_400(api):
    client = await create_client(api)
    ticket = await create_ticket(api, client["id"])

    response = await api.put(
        f"/tickets/{ticket['id']}", json={"status": "CLOSED"}, headers=SUPERVISOR
    )

    assert response.status_code == 400
    assert response.json()["error_type"] == "validation"


async def test_agent_sees_only_own_tickets(api):
    client = await create_client(api)
    agent = await create_agent(api)
    mine = await create_ticket(api, client["id"], agent["id"])
    other = await create_ticket(api, client["id"])

    response = await api.get("/tickets", headers=as_agent(agent))
    assert [t["id"] for t in response.json()["data"]] == [mine["id"]]

    response = await api.get(f"/tickets/{other['id']}", headers=as_agent(agent))
    assert response.status_code == 403


async def test_supervisor_filters_tickets(api):
    vip = await create_client(api, "VIP")
    normal = await create_client(api)
    await create_ticket(api, vip["id"])
    await create_ticket(api, normal["id"])

    response = await api.get("/tickets", params={"priority": "HIGH"}, headers=SUPERVISOR)

    body = response.json()
    assert body["pagination"]["total_items"] == 1
    assert body["data"][0]["client_id"] == vip["id"]


async def test_page_size_above_limit_is_rejected(api):
    response = await api.get("/tickets", params={"page_size": 101}, headers=SUPERVISOR)

    assert response.status_code == 422


async def test_soft_delete(api):
    client = await create_client(api)
    agent = await create_agent(api)
    ticket = await create_ticket(api, client["id"], agent["id"])

    response = await api.delete(f"/tickets/{ticket['id']}", headers=as_agent(agent))
    assert response.status_code == 403

    response = await api.delete(f"/tickets/{ticket['id']}", headers=SUPERVISOR)
    assert response.status_code == 204

    response = await api.get(f"/tickets/{ticket['id']}", headers=SUPERVISOR)
    assert response.status_code == 404

    response = await api.get("/tickets", headers=SUPERVISOR)
    assert response.json()["data"] == []


# =============================================================================
# SLA
# =============================================================================

async def backdate_ticket(session_maker, client_id, hours):
    created_at = utcnow() - timedelta(hours=hours)
    async with session_maker() as session:
        ticket = await SQLAlchemyTicketRepository(session).create(Ticket(
            id=str(uuid4()),
            title="Old ticket",
            description="Nobody picked this up",
            status=TicketStatus.OPEN,
            priority=Priority.HIGH,
            escalation_tier=EscalationTier.TIER_1,
            client_id=client_id,
            created_at=created_at,
            updated_at=created_at,
        ))
        await session.commit()
    return ticket


async def test_manual_sweep_escalates_overdue_vip_ticket(api, session_maker):
    vip = await create_client(api, "VIP")
    normal = await create_client(api)
    overdue = await backdate_ticket(session_maker, vip["id"], hours=3)
    await backdate_ticket(session_maker, normal["id"], hours=3)

    response = await api.get("/sla/breaches", headers=SUPERVISOR)
    assert [b["ticket_id"] for b in response.json()] == [overdue.id]

    response = await api.post("/sla/sweep", headers=SUPERVISOR)
    assert response.status_code == 200
    assert response.json()["escalated_ids"] == [overdue.id]

    ticket = (await api.get(f"/tickets/{overdue.id}", headers=SUPERVISOR)).json()
    assert ticket["status"] == "ESCALATED"
    assert ticket["escalation_tier"] == "TIER_2"

    response = await api.post("/sla/sweep", headers=SUPERVISOR)
    assert response.json()["escalated"] == 0


async def test_agent_cannot_run_sweep(api):
    agent = await create_agent(api)

    response = await api.post("/sla/sweep", headers=as_agent(agent))

    assert response.status_code == 403
