"""Team membership: create, join, leave, delete, and leader management.

A user belongs to at most one team. Finding a user's team scans every
team document, which is fine for a few hundred teams; past that a
membership index would be needed.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from realm.errors import (
    AlreadyInTeamError,
    AlreadyMemberError,
    InvalidRequestError,
    LeaderCannotLeaveError,
    NotAMemberError,
    NotFoundError,
    NotLeaderError,
    PermissionDeniedError,
    TeamFullError,
)
from realm.models import Session, Team, TeamMember, TeamRole, clamp_team_size, utc_now
from server.config import settings
from server.store import TEAMS, get_store

logger = logging.getLogger(__name__)


async def get_team(team_id: str) -> Team | None:
    store = await get_store()
    doc = await store.get(TEAMS, team_id)
    return Team.model_validate(doc) if doc else None


async def _require_team(team_id: str) -> Team:
    team = await get_team(team_id)
    if team is None:
        raise NotFoundError("Team not found")
    return team


def _verify_leader(session: Session, team: Team, action: str) -> None:
    if team.leader_id != session.user_id:
        raise NotLeaderError(f"Only the team leader can {action}")


async def _save(team: Team) -> None:
    team.updated_at = utc_now()
    store = await get_store()
    await store.set(TEAMS, team.id, team.model_dump(mode="json"))


async def list_teams() -> list[Team]:
    store = await get_store()
    return [Team.model_validate(d) for d in await store.query(TEAMS, order_by=[("name", "asc")])]


async def get_user_team(user_id: str) -> Team | None:
    """The team a user belongs to, if any."""
    store = await get_store()
    for doc in await store.query(TEAMS):
        team = Team.model_validate(doc)
        if team.has_member(user_id):
            return team
    return None


async def create_team(
    session: Session,
    name: str,
    username: str,
    description: str = "",
    max_members: int | None = None,
) -> Team:
    """Create a team led by the session user. Capacity is clamped to 2..20."""
    max_members = settings.default_team_max_members if max_members is None else max_members
    store = await get_store()
    async with store.transaction():
        if await get_user_team(session.user_id) is not None:
            raise AlreadyInTeamError("You already belong to a team")
        try:
            team = Team(
                name=name,
                description=description,
                leader_id=session.user_id,
                leader_name=username,
                members=[TeamMember(user_id=session.user_id, username=username, role=TeamRole.LEADER)],
                max_members=clamp_team_size(max_members),
            )
        except ValidationError as exc:
            raise InvalidRequestError(str(exc)) from exc
        await store.create(TEAMS, team.model_dump(mode="json"))
    logger.info("Team %s (%s) created by %s", team.id, team.name, session.user_id)
    return team


async def _add_member(team_id: str, user_id: str, username: str) -> Team:
    team = await _require_team(team_id)
    if team.has_member(user_id):
        raise AlreadyMemberError("Already a member of this team")
    if await get_user_team(user_id) is not None:
        raise AlreadyInTeamError("Already a member of another team")
    if team.is_full:
        raise TeamFullError("This team has reached its member limit")
    team.members.append(TeamMember(user_id=user_id, username=username))
    await _save(team)
    return team


async def join_team(session: Session, team_id: str, username: str) -> Team:
    store = await get_store()
    async with store.transaction():
        team = await _add_member(team_id, session.user_id, username)
    logger.info("User %s joined team %s", session.user_id, team_id)
    return team


async def leave_team(session: Session, team_id: str) -> Team:
    """Leave a team. The leader must transfer leadership or delete the team."""
    store = await get_store()
    async with store.transaction():
        team = await _require_team(team_id)
        if team.leader_id == session.user_id:
            raise LeaderCannotLeaveError(
                "The leader cannot leave without transferring leadership"
            )
        if not team.has_member(session.user_id):
            raise NotAMemberError("You are not a member of this team")
        team.members = [m for m in team.members if m.user_id != session.user_id]
        await _save(team)
    logger.info("User %s left team %s", session.user_id, team_id)
    return team


async def delete_team(session: Session, team_id: str) -> None:
    store = await get_store()
    async with store.transaction():
        team = await _require_team(team_id)
        _verify_leader(session, team, "delete the team")
        await store.delete(TEAMS, team_id)
    logger.info("Team %s deleted by %s", team_id, session.user_id)


# --- Leader management ---


async def update_max_members(session: Session, team_id: str, max_members: int) -> Team:
    store = await get_store()
    async with store.transaction():
        team = await _require_team(team_id)
        _verify_leader(session, team, "edit the team")
        max_members = clamp_team_size(max_members)
        if max_members < len(team.members):
            raise InvalidRequestError(
                f"Cannot reduce to {max_members} members; "
                f"the team has {len(team.members)} members"
            )
        team.max_members = max_members
        await _save(team)
    return team


async def remove_member(session: Session, team_id: str, user_id: str) -> Team:
    store = await get_store()
    async with store.transaction():
        team = await _require_team(team_id)
        _verify_leader(session, team, "remove members")
        if user_id == team.leader_id:
            raise InvalidRequestError("The leader cannot be removed")
        if not team.has_member(user_id):
            raise NotAMemberError("User is not a member of this team")
        team.members = [m for m in team.members if m.user_id != user_id]
        await _save(team)
    logger.info("User %s removed from team %s by %s", user_id, team_id, session.user_id)
    return team


async def transfer_leadership(session: Session, team_id: str, user_id: str) -> Team:
    store = await get_store()
    async with store.transaction():
        team = await _require_team(team_id)
        _verify_leader(session, team, "transfer leadership")
        new_leader = next((m for m in team.members if m.user_id == user_id), None)
        if new_leader is None:
            raise NotAMemberError("User is not a member of this team")
        for member in team.members:
            member.role = TeamRole.LEADER if member.user_id == user_id else TeamRole.MEMBER
        team.leader_id = new_leader.user_id
        team.leader_name = new_leader.username
        await _save(team)
    logger.info("Team %s leadership passed to %s", team_id, user_id)
    return team


async def master_move_member(
    session: Session,
    user_id: str,
    username: str,
    team_id: str | None,
) -> Team | None:
    """Master override: take a user out of their team and into another (or none)."""
    if not session.is_master:
        logger.warning("User %s denied team reassignment", session.user_id)
        raise PermissionDeniedError("Only the master can move team members")
    store = await get_store()
    async with store.transaction():
        current = await get_user_team(user_id)
        if current is not None:
            if current.id == team_id:
                return current
            if current.leader_id == user_id:
                raise LeaderCannotLeaveError(
                    "The leader cannot leave without transferring leadership"
                )
            current.members = [m for m in current.members if m.user_id != user_id]
            await _save(current)
        team = await _add_member(team_id, user_id, username) if team_id else None
    logger.info("Master %s moved user %s to team %s", session.user_id, user_id, team_id)
    return team
