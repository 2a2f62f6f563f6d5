"""Mission lifecycle: master-authored missions, per-user accept and complete.

Each user moves through not-accepted -> accepted -> completed on a mission,
tracked by the mission's ``accepted_by`` and ``completed_by`` lists. The
mission-level ``status`` belongs to the master and only decides whether a
mission is listed as available.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from realm.errors import (
    AlreadyAcceptedError,
    AlreadyCompletedError,
    InvalidRequestError,
    NotAcceptedError,
    NotFoundError,
    PermissionDeniedError,
)
from realm.models import (
    Mission,
    MissionDifficulty,
    MissionReward,
    MissionRequirements,
    MissionStatus,
    Profile,
    Session,
    utc_now,
)
from server.config import settings
from server.profiles import profiles
from server.store import MISSIONS, Filter, get_store

logger = logging.getLogger(__name__)


@dataclass
class Completion:
    mission: Mission
    reward_granted: bool
    profile: Profile | None = None


def meets_requirements(mission: Mission, profile: Profile, in_team: bool) -> bool:
    """Whether a profile satisfies a mission's advisory requirements."""
    req = mission.requirements
    if req is None:
        return True
    if req.min_level is not None and profile.level < req.min_level:
        return False
    if req.required_class and profile.char_class not in req.required_class:
        return False
    if req.required_team and not in_team:
        return False
    return True


async def _require_mission(mission_id: str) -> Mission:
    mission = await get_mission(mission_id)
    if mission is None:
        raise NotFoundError("Mission not found")
    return mission


def _verify_creator(session: Session, mission: Mission, action: str) -> None:
    if not session.is_master or mission.created_by != session.user_id:
        logger.warning("User %s denied %s on mission %s", session.user_id, action, mission.id)
        raise PermissionDeniedError(f"Only the master who created this mission can {action} it")


# --- Reads ---


async def get_mission(mission_id: str) -> Mission | None:
    store = await get_store()
    doc = await store.get(MISSIONS, mission_id)
    return Mission.model_validate(doc) if doc else None


async def list_missions() -> list[Mission]:
    store = await get_store()
    docs = await store.query(MISSIONS, order_by=[("created_at", "desc")])
    return [Mission.model_validate(d) for d in docs]


async def list_available_missions() -> list[Mission]:
    store = await get_store()
    docs = await store.query(
        MISSIONS,
        filters=[Filter("status", "==", MissionStatus.AVAILABLE.value)],
        order_by=[("created_at", "desc")],
    )
    return [Mission.model_validate(d) for d in docs]


async def list_accepted_missions(user_id: str) -> list[Mission]:
    store = await get_store()
    docs = await store.query(
        MISSIONS,
        filters=[Filter("accepted_by", "array-contains", user_id)],
        order_by=[("created_at", "desc")],
    )
    return [Mission.model_validate(d) for d in docs]


# --- Master management ---


async def create_mission(
    session: Session,
    title: str,
    description: str = "",
    difficulty: MissionDifficulty = MissionDifficulty.EASY,
    reward: MissionReward | None = None,
    requirements: MissionRequirements | None = None,
    created_by_name: str = "",
) -> Mission:
    if not session.is_master:
        logger.warning("User %s denied mission creation", session.user_id)
        raise PermissionDeniedError("Only the master can create missions")
    try:
        mission = Mission(
            title=title,
            description=description,
            difficulty=difficulty,
            reward=reward or MissionReward(),
            requirements=requirements,
            created_by=session.user_id,
            created_by_name=created_by_name or session.email,
        )
    except ValidationError as exc:
        raise InvalidRequestError(str(exc)) from exc
    store = await get_store()
    await store.create(MISSIONS, mission.model_dump(mode="json"))
    logger.info("Mission %s (%s) created by %s", mission.id, mission.title, session.user_id)
    return mission


async def update_mission(session: Session, mission_id: str, fields: dict) -> Mission:
    frozen = {"id", "created_by", "created_at", "accepted_by", "completed_by"} & fields.keys()
    if frozen:
        raise InvalidRequestError(f"Cannot change {sorted(frozen)}")
    store = await get_store()
    async with store.transaction():
        mission = await _require_mission(mission_id)
        _verify_creator(session, mission, "update")
        try:
            updated = Mission.model_validate(
                {**mission.model_dump(mode="json"), **fields, "updated_at": utc_now()}
            )
        except ValidationError as exc:
            raise InvalidRequestError(str(exc)) from exc
        await store.set(MISSIONS, mission_id, updated.model_dump(mode="json"))
    return updated


async def delete_mission(session: Session, mission_id: str) -> None:
    store = await get_store()
    async with store.transaction():
        mission = await _require_mission(mission_id)
        _verify_creator(session, mission, "delete")
        await store.delete(MISSIONS, mission_id)
    logger.info("Mission %s deleted by %s", mission_id, session.user_id)


# --- Per-user lifecycle ---


async def accept_mission(session: Session, mission_id: str) -> Mission:
    """Accept a mission. Level, class and team requirements are not enforced."""
    store = await get_store()
    async with store.transaction():
        mission = await _require_mission(mission_id)
        if session.user_id in mission.accepted_by:
            raise AlreadyAcceptedError("You already accepted this mission")
        mission.accepted_by.append(session.user_id)
        mission.updated_at = utc_now()
        await store.update(MISSIONS, mission_id, {
            "accepted_by": mission.accepted_by,
            "updated_at": mission.updated_at,
        })
    logger.info("User %s accepted mission %s", session.user_id, mission_id)
    return mission


async def complete_mission(session: Session, mission_id: str) -> Completion:
    """Complete an accepted mission.

    With ``mission_rewards_on_completion`` set, the reward goes to the
    user's profile in the same transaction.
    """
    store = await get_store()
    async with store.transaction():
        mission = await _require_mission(mission_id)
        if session.user_id not in mission.accepted_by:
            raise NotAcceptedError("You have not accepted this mission")
        if session.user_id in mission.completed_by:
            raise AlreadyCompletedError("You already completed this mission")

        reward = mission.reward
        grant = settings.mission_rewards_on_completion and (reward.experience or reward.gold)
        if grant:
            # Fail before any write when there is nobody to reward
            await profiles.require(session.user_id)

        mission.completed_by.append(session.user_id)
        mission.updated_at = utc_now()
        await store.update(MISSIONS, mission_id, {
            "completed_by": mission.completed_by,
            "updated_at": mission.updated_at,
        })
        profile = None
        if grant:
            profile = await profiles.grant_reward(
                session.user_id, experience=reward.experience, gold=reward.gold,
            )

    logger.info("User %s completed mission %s (reward granted: %s)",
                session.user_id, mission_id, bool(grant))
    return Completion(mission=mission, reward_granted=bool(grant), profile=profile)
