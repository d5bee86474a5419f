"""
Test configuration and fixtures.

Provides:
- In-memory repository fakes sharing one store, for service tests
- A fixed clock
- An in-memory SQLite engine (aiosqlite) with savepoint support, for
  repository and HTTP tests
"""
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from supportdesk.config import (
    SLA_TRACKED_STATUSES,
    ClientCategory,
    EscalationTier,
    TicketStatus,
)
from supportdesk.core import RepositoryException
from supportdesk.directory.application import (
    AgentService,
    ClientService,
    IAgentRepository,
    IClientRepository,
)
from supportdesk.directory.domain import Agent, Client
from supportdesk.infrastructure.database import build_session_maker, create_tables
from supportdesk.sla.application import SLAEscalationSweeper
from supportdesk.sla.domain import SLAConfig
from supportdesk.sla.infrastructure import StaticSLAConfigProvider
from supportdesk.tickets.application import ITicketRepository, TicketLifecycleService
from supportdesk.tickets.domain import Ticket

FIXED_NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# In-memory repositories
# =============================================================================

@dataclass
class FakeStore:
    clients: Dict[str, Client] = field(default_factory=dict)
    agents: Dict[str, Agent] = field(default_factory=dict)
    tickets: Dict[str, Ticket] = field(default_factory=dict)


class FakeClientRepository(IClientRepository):
    def __init__(self, store: FakeStore):
        self.store = store

    async def get_by_id(self, client_id: str) -> Optional[Client]:
        return self.store.clients.get(client_id)

    async def get_by_email(self, email: str) -> Optional[Client]:
        return next((c for c in self.store.clients.values() if c.email == email), None)

    async def create(self, client: Client) -> Client:
        self.store.clients[client.id] = client
        return client

    async def update(self, client_id: str, fields: dict) -> Client:
        self.store.clients[client_id] = replace(self.store.clients[client_id], **fields)
        return self.store.clients[client_id]

    async def delete(self, client_id: str) -> None:
        del self.store.clients[client_id]

    async def list(self, limit: int, offset: int):
        ordered = sorted(self.store.clients.values(), key=lambda c: c.created_at, reverse=True)
        rows = [(c, await self.count_tickets(c.id)) for c in ordered[offset:offset + limit]]
        return rows, len(ordered)

    async def count_tickets(self, client_id: str) -> int:
        return sum(1 for t in self.store.tickets.values() if t.client_id == client_id)


class FakeAgentRepository(IAgentRepository):
    def __init__(self, store: FakeStore):
        self.store = store

    async def get_by_id(self, agent_id: str) -> Optional[Agent]:
        return self.store.agents.get(agent_id)

    async def get_by_user_id(self, user_id: str) -> Optional[Agent]:
        return next((a for a in self.store.agents.values() if a.user_id == user_id), None)

    async def get_by_email(self, email: str) -> Optional[Agent]:
        return next((a for a in self.store.agents.values() if a.email == email), None)

    async def create(self, agent: Agent) -> Agent:
        self.store.agents[agent.id] = agent
        return agent

    async def update(self, agent_id: str, fields: dict) -> Agent:
        self.store.agents[agent_id] = replace(self.store.agents[agent_id], **fields)
        return self.store.agents[agent_id]

    async def list(self, active_only: bool = False) -> List[Agent]:
        agents = sorted(self.store.agents.values(), key=lambda a: a.name)
        return [a for a in agents if a.active or not active_only]


class FakeTicketRepository(ITicketRepository):
    """Stores bare tickets and attaches client/agent snapshots on read."""

    def __init__(self, store: FakeStore):
        self.store = store
        self.fail_escalation_for = set()
        self.crash_escalation_for = set()
        self.unreadable_ids = []
        self.escalate_calls = []

    def _snapshot(self, ticket: Ticket) -> Ticket:
        return replace(
            ticket,
            client=self.store.clients.get(ticket.client_id),
            agent=self.store.agents.get(ticket.agent_id) if ticket.agent_id else None,
        )

    async def create(self, ticket: Ticket) -> Ticket:
        self.store.tickets[ticket.id] = replace(ticket, client=None, agent=None)
        return self._snapshot(ticket)

    async def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        ticket = self.store.tickets.get(ticket_id)
        return self._snapshot(ticket) if ticket else None

    async def update(self, ticket_id: str, fields: dict) -> Ticket:
        self.store.tickets[ticket_id] = replace(self.store.tickets[ticket_id], **fields)
        return self._snapshot(self.store.tickets[ticket_id])

    async def list(self, filters, limit: int, offset: int):
        def matches(t: Ticket) -> bool:
            return (
                t.deleted_at is None
                and (filters.status is None or t.status == filters.status)
                and (filters.priority is None or t.priority == filters.priority)
                and (filters.client_id is None or t.client_id == filters.client_id)
                and (filters.agent_id is None or t.agent_id == filters.agent_id)
                and (filters.date_from is None or t.created_at >= filters.date_from)
                and (filters.date_to is None or t.created_at <= filters.date_to)
            )

        found = sorted(
            (t for t in self.store.tickets.values() if matches(t)),
            key=lambda t: t.created_at,
            reverse=True,
        )
        return [self._snapshot(t) for t in found[offset:offset + limit]], len(found)

    async def list_sla_candidates(self, statuses):
        tickets = [
            self._snapshot(t) for t in self.store.tickets.values()
            if t.deleted_at is None and t.status in statuses
        ]
        return tickets, list(self.unreadable_ids)

    async def escalate(self, ticket_id, expected_tier, new_tier, at) -> bool:
        self.escalate_calls.append(ticket_id)
        if ticket_id in self.fail_escalation_for:
            raise RepositoryException(f"Failed to escalate ticket {ticket_id}")
        if ticket_id in self.crash_escalation_for:
            raise RuntimeError("connection reset")

        ticket = self.store.tickets[ticket_id]
        if (
            ticket.deleted_at is not None
            or ticket.status not in SLA_TRACKED_STATUSES
            or ticket.escalation_tier != expected_tier
        ):
            return False

        self.store.tickets[ticket_id] = replace(
            ticket,
            status=TicketStatus.ESCALATED,
            escalation_tier=new_tier,
            updated_at=at,
        )
        return True


# =============================================================================
# Fixtures: fakes and services
# =============================================================================

@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def client_repo(store):
    return FakeClientRepository(store)


@pytest.fixture
def agent_repo(store):
    return FakeAgentRepository(store)


@pytest.fixture
def ticket_repo(store):
    return FakeTicketRepository(store)


@pytest.fixture
def ticket_service(ticket_repo, client_repo, agent_repo, clock):
    return TicketLifecycleService(ticket_repo, client_repo, agent_repo, clock=clock)


@pytest.fixture
def client_service(client_repo, clock):
    return ClientService(client_repo, clock=clock)


@pytest.fixture
def agent_service(agent_repo, clock):
    return AgentService(agent_repo, clock=clock)


@pytest.fixture
def sweeper(ticket_repo, clock):
    return SLAEscalationSweeper(ticket_repo, StaticSLAConfigProvider(SLAConfig()), clock=clock)


def make_client(store: FakeStore, client_id: str, category: ClientCategory) -> Client:
    client = Client(
        id=client_id,
        name=f"Client {client_id}",
        email=f"{client_id}@example.com",
        category=category,
        created_at=FIXED_NOW - timedelta(days=30),
        updated_at=FIXED_NOW - timedelta(days=30),
    )
    store.clients[client.id] = client
    return client


def make_agent(
    store: FakeStore,
    agent_id: str,
    level: EscalationTier = EscalationTier.TIER_1,
    active: bool = True,
) -> Agent:
    agent = Agent(
        id=agent_id,
        name=f"Agent {agent_id}",
        email=f"{agent_id}@support.example.com",
        user_id=f"user-{agent_id}",
        level=level,
        active=active,
        created_at=FIXED_NOW - timedelta(days=30),
        updated_at=FIXED_NOW - timedelta(days=30),
    )
    store.agents[agent.id] = agent
    return agent


def make_ticket(
    store: FakeStore,
    ticket_id: str,
    client: Client,
    age: timedelta = timedelta(minutes=5),
    status: TicketStatus = TicketStatus.OPEN,
    tier: EscalationTier = EscalationTier.TIER_1,
    agent: Optional[Agent] = None,
    deleted: bool = False,
) -> Ticket:
    created_at = FIXED_NOW - age
    ticket = Ticket(
        id=ticket_id,
        title=f"Ticket {ticket_id}",
        description="Something is broken",
        status=status,
        priority=client.ticket_priority,
        escalation_tier=tier,
        client_id=client.id,
        agent_id=agent.id if agent else None,
        created_at=created_at,
        updated_at=created_at,
        deleted_at=FIXED_NOW if deleted else None,
    )
    store.tickets[ticket.id] = ticket
    return ticket


@pytest.fixture
def vip_client(store) -> Client:
    return make_client(store, "client-vip", ClientCategory.VIP)


@pytest.fixture
def normal_client(store) -> Client:
    return make_client(store, "client-normal", ClientCategory.NORMAL)


@pytest.fixture
def tier1_agent(store) -> Agent:
    return make_agent(store, "agent-t1", EscalationTier.TIER_1)


@pytest.fixture
def tier3_agent(store) -> Agent:
    return make_agent(store, "agent-t3", EscalationTier.TIER_3)


# =============================================================================
# Database Fixtures (in-memory SQLite)
# =============================================================================

@pytest.fixture
async def engine():
    """
    Fresh in-memory database per test.

    The driver's implicit transaction handling is switched off so SAVEPOINT
    (used by conditional escalation) behaves as on PostgreSQL.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return build_session_maker(engine)


@pytest.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session

