"""
Actor Resolution
================

Every request acts on behalf of an actor identified by two headers set by the
upstream gateway:

- ``X-Actor-Id``: the staff user id
- ``X-Actor-Role``: ADMIN, SUPERVISOR or AGENT
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Header

from supportdesk.config import Role
from supportdesk.core import AuthenticationException, ForbiddenException


@dataclass(frozen=True)
class Actor:
    id: str
    role: Role


async def get_actor(
    x_actor_id: Optional[str] = Header(None, description="Acting user id"),
    x_actor_role: Optional[str] = Header(None, description="ADMIN, SUPERVISOR or AGENT"),
) -> Actor:
    """
    Resolve the acting user from the request headers.

    Raises:
        AuthenticationException: A header is missing or blank
        ForbiddenException: The role is not one of the known roles
    """
    if not x_actor_id or not x_actor_id.strip() or not x_actor_role:
        raise AuthenticationException("Missing X-Actor-Id or X-Actor-Role header")

    try:
        role = Role(x_actor_role.strip().upper())
    except ValueError:
        raise ForbiddenException("Unknown role", {"role": x_actor_role})

    return Actor(id=x_actor_id.strip(), role=role)
