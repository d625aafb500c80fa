"""Authorization policies for civic operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID

from civichub.domain import models
from civichub.domain.exceptions import ForbiddenError

MANAGE_ISSUES = "manage_issues"
MANAGE_CATEGORIES = "manage_categories"
MANAGE_EVENTS = "manage_events"
MANAGE_USERS = "manage_users"
VIEW_REPORTS = "view_reports"
SEND_NOTIFICATIONS = "send_notifications"
USE_AI_ADMIN = "use_ai_admin"

ROLE_CAPABILITIES: dict[str, frozenset[str]] = {
	"user": frozenset(),
	"admin": frozenset(
		{
			MANAGE_ISSUES,
			MANAGE_CATEGORIES,
			MANAGE_EVENTS,
			MANAGE_USERS,
			VIEW_REPORTS,
			SEND_NOTIFICATIONS,
			USE_AI_ADMIN,
		}
	),
}


@dataclass(slots=True, frozen=True)
class Actor:
	"""Authenticated caller with its role resolved from the profile store."""

	id: UUID
	role: str = "user"
	is_active: bool = True
	capabilities: frozenset[str] = field(default_factory=frozenset)

	@property
	def is_admin(self) -> bool:
		return self.role == "admin"

	def can(self, capability: str) -> bool:
		return capability in self.capabilities


@dataclass(slots=True, frozen=True)
class Decision:
	allowed: bool
	reason: Optional[str] = None


def capabilities_for(role: str | None) -> frozenset[str]:
	return ROLE_CAPABILITIES.get(role or "user", frozenset())


def actor_from_profile(user_id: UUID, profile: models.Profile | None) -> Actor:
	"""Build an actor; identities without a profile row act as plain users."""
	if profile is None:
		return Actor(id=user_id, capabilities=capabilities_for("user"))
	return Actor(
		id=user_id,
		role=profile.role,
		is_active=profile.is_active,
		capabilities=capabilities_for(profile.role),
	)


def authorize(
	actor: Actor,
	*,
	owner_id: UUID | None = None,
	capability: str | None = None,
) -> Decision:
	"""Combine ownership and role policies with OR semantics."""
	if owner_id is not None and actor.id == owner_id:
		return Decision(True)
	if capability is not None and actor.can(capability):
		return Decision(True)
	if owner_id is not None or capability is None:
		return Decision(False, "not_owner")
	return Decision(False, f"missing_capability:{capability}")


def require(decision: Decision) -> None:
	if not decision.allowed:
		raise ForbiddenError(decision.reason or "forbidden")


def require_active(actor: Actor) -> Actor:
	if not actor.is_active:
		raise ForbiddenError("account_inactive")
	return actor


def require_capability(actor: Actor, capability: str) -> None:
	require(authorize(actor, capability=capability))


def require_owner_or(actor: Actor, owner_id: UUID, capability: str) -> None:
	require(authorize(actor, owner_id=owner_id, capability=capability))
