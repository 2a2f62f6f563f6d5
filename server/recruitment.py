"""Agent roster: catalog management and recruitment."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from realm.errors import (
    InsufficientFundsError,
    InvalidRequestError,
    NotFoundError,
    PermissionDeniedError,
)
from realm.models import Agent, RecruitedAgent, Session, utc_now
from server.profiles import profiles
from server.store import AGENTS, PROFILES, RECRUITED_AGENTS, Filter, get_store

logger = logging.getLogger(__name__)


def _verify_master(session: Session) -> None:
    if not session.is_master:
        logger.warning("User %s denied agent catalog change", session.user_id)
        raise PermissionDeniedError("Only the master can manage agents")


def _validated(data: dict) -> Agent:
    try:
        return Agent.model_validate(data)
    except ValidationError as exc:
        raise InvalidRequestError(str(exc)) from exc


async def list_agents() -> list[Agent]:
    store = await get_store()
    return [Agent.model_validate(d) for d in await store.query(AGENTS)]


async def get_agent(agent_id: str) -> Agent | None:
    store = await get_store()
    doc = await store.get(AGENTS, agent_id)
    return Agent.model_validate(doc) if doc else None


async def _require_agent(agent_id: str) -> Agent:
    agent = await get_agent(agent_id)
    if agent is None:
        raise NotFoundError("Agent not found")
    return agent


async def create_agent(session: Session, fields: dict) -> Agent:
    _verify_master(session)
    agent = _validated({k: v for k, v in fields.items() if v is not None})
    store = await get_store()
    await store.create(AGENTS, agent.model_dump(mode="json"))
    logger.info("Agent %s (%s) added by %s", agent.id, agent.name, session.user_id)
    return agent


async def update_agent(session: Session, agent_id: str, fields: dict) -> Agent:
    _verify_master(session)
    if "id" in fields:
        raise InvalidRequestError("Cannot change an agent's id")
    store = await get_store()
    async with store.transaction():
        agent = await _require_agent(agent_id)
        updated = _validated({**agent.model_dump(mode="json"), **fields})
        await store.set(AGENTS, agent_id, updated.model_dump(mode="json"))
    return updated


async def delete_agent(session: Session, agent_id: str) -> None:
    _verify_master(session)
    store = await get_store()
    async with store.transaction():
        await _require_agent(agent_id)
        await store.delete(AGENTS, agent_id)
    logger.info("Agent %s removed by %s", agent_id, session.user_id)


async def recruit_agent(
    session: Session,
    agent_id: str,
    profile_id: str | None = None,
) -> RecruitedAgent:
    """Pay for an agent and add it to the recruiter's roster.

    Recruits never stack: every call adds a new roster entry.
    """
    profile_id = profile_id or session.user_id
    store = await get_store()
    async with store.transaction():
        agent = await _require_agent(agent_id)
        profile = await profiles.require(profile_id)
        if profile.user_id != session.user_id and not session.is_master:
            raise PermissionDeniedError("You can only recruit for your own profile")
        if profile.gold < agent.price:
            raise InsufficientFundsError(agent.price - profile.gold)

        recruit = RecruitedAgent(
            owner_id=session.user_id,
            profile_id=profile_id,
            agent_id=agent.id,
            agent_name=agent.name,
            agent_image=agent.image_url,
        )
        await store.create(RECRUITED_AGENTS, recruit.model_dump(mode="json"))
        await store.update(PROFILES, profile_id, {
            "gold": profile.gold - agent.price,
            "updated_at": utc_now(),
        })

    logger.info("User %s recruited agent %s for %d gold", session.user_id, agent.name, agent.price)
    return recruit


async def list_recruited_agents(owner_id: str) -> list[RecruitedAgent]:
    store = await get_store()
    docs = await store.query(
        RECRUITED_AGENTS,
        filters=[Filter("owner_id", "==", owner_id)],
        order_by=[("recruited_at", "desc")],
    )
    return [RecruitedAgent.model_validate(d) for d in docs]
