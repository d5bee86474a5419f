"""Tests for client and agent management."""

import pytest

from supportdesk.config import ClientCategory, EscalationTier, Priority
from supportdesk.core import ConflictException, ResourceNotFoundException
from supportdesk.directory.application import (
    AgentCreateDTO,
    AgentUpdateDTO,
    ClientCreateDTO,
    ClientUpdateDTO,
)
from supportdesk.shared.pagination import PageRequest

from conftest import FIXED_NOW, make_ticket


# =============================================================================
# Clients
# =============================================================================

async def test_create_client_defaults_to_normal(client_service):
    client = await client_service.create_client(
        ClientCreateDTO(name="Acme Corp", email="ops@acme.example")
    )

    assert client.category == ClientCategory.NORMAL
    assert client.ticket_priority == Priority.MEDIUM
    assert client.created_at == FIXED_NOW


async def test_duplicate_client_email_conflicts(client_service, vip_client):
    with pytest.raises(ConflictException):
        await client_service.create_client(
            ClientCreateDTO(name="Someone Else", email=vip_client.email)
        )


def test_client_email_must_look_like_an_email():
    with pytest.raises(ValueError):
        ClientCreateDTO(name="Acme Corp", email="not-an-email")


def test_client_category_cannot_be_updated():
    with pytest.raises(ValueError):
        ClientUpdateDTO(category=ClientCategory.VIP)


async def test_update_client_email_collision(client_service, vip_client, normal_client):
    with pytest.raises(ConflictException):
        await client_service.update_client(normal_client.id, ClientUpdateDTO(email=vip_client.email))


async def test_update_client_keeps_category(client_service, vip_client):
    client = await client_service.update_client(vip_client.id, ClientUpdateDTO(organization="Globex"))

    assert client.organization == "Globex"
    assert client.category == ClientCategory.VIP
    assert client.updated_at == FIXED_NOW


async def test_delete_client_with_tickets_conflicts(client_service, store, normal_client):
    # Soft-deleted tickets still count
    make_ticket(store, "t-gone", normal_client, deleted=True)

    with pytest.raises(ConflictException):
        await client_service.delete_client(normal_client.id)

    assert normal_client.id in store.clients


async def test_delete_client_without_tickets(client_service, store, normal_client):
    await client_service.delete_client(normal_client.id)

    assert normal_client.id not in store.clients
    with pytest.raises(ResourceNotFoundException):
        await client_service.get_client(normal_client.id)


async def test_list_clients_carries_ticket_counts(client_service, store, vip_client, normal_client):
    make_ticket(store, "t-1", vip_client)
    make_ticket(store, "t-2", vip_client)

    page = await client_service.list_clients(PageRequest())

    counts = {client.id: count for client, count in page.items}
    assert counts == {vip_client.id: 2, normal_client.id: 0}
    assert page.total_items == 2


# =============================================================================
# Agents
# =============================================================================

async def test_create_agent(agent_service):
    agent = await agent_service.create_agent(
        AgentCreateDTO(name="Dana Reyes", email="dana@support.example", user_id="user-42")
    )

    assert agent.level == EscalationTier.TIER_1
    assert agent.active


async def test_agent_user_can_have_one_profile(agent_service, tier1_agent):
    with pytest.raises(ConflictException):
        await agent_service.create_agent(
            AgentCreateDTO(name="Another Name", email="other@support.example", user_id=tier1_agent.user_id)
        )


async def test_promote_agent(agent_service, tier1_agent):
    agent = await agent_service.update_agent(tier1_agent.id, AgentUpdateDTO(level=EscalationTier.TIER_2))

    assert agent.level == EscalationTier.TIER_2
    assert agent.can_handle(EscalationTier.TIER_2)
    assert not agent.can_handle(EscalationTier.TIER_3)


async def test_deactivate_agent_is_idempotent(agent_service, tier1_agent):
    first = await agent_service.deactivate_agent(tier1_agent.id)
    second = await agent_service.deactivate_agent(tier1_agent.id)

    assert not first.active
    assert second == first


async def test_list_active_agents(agent_service, tier1_agent, tier3_agent):
    await agent_service.deactivate_agent(tier1_agent.id)

    active = await agent_service.list_agents(active_only=True)

    assert [a.id for a in active] == [tier3_agent.id]


async def test_unknown_agent_is_not_found(agent_service):
    with pytest.raises(ResourceNotFoundException):
        await agent_service.get_agent("missing")
