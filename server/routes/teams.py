"""Team routes: membership and leader management."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from realm.errors import NotFoundError
from realm.models import Session, Team
from server import teams
from server.auth import get_current_session, require_master
from server.models import (
    JoinTeamRequest,
    MaxMembersRequest,
    MoveMemberRequest,
    TeamCreateRequest,
    TeamMemberRequest,
)

router = APIRouter()


@router.get("/teams", response_model=list[Team])
async def list_teams(session: Session = Depends(get_current_session)):
    return await teams.list_teams()


@router.get("/teams/mine", response_model=Team | None)
async def my_team(session: Session = Depends(get_current_session)):
    return await teams.get_user_team(session.user_id)


@router.get("/teams/{team_id}", response_model=Team)
async def get_team(team_id: str, session: Session = Depends(get_current_session)):
    team = await teams.get_team(team_id)
    if team is None:
        raise NotFoundError("Team not found")
    return team


@router.post("/teams", response_model=Team, status_code=201)
async def create_team(req: TeamCreateRequest, session: Session = Depends(get_current_session)):
    return await teams.create_team(
        session, req.name, req.username,
        description=req.description,
        max_members=req.max_members,
    )


@router.post("/teams/{team_id}/join", response_model=Team)
async def join(team_id: str, req: JoinTeamRequest, session: Session = Depends(get_current_session)):
    return await teams.join_team(session, team_id, req.username)


@router.post("/teams/{team_id}/leave", response_model=Team)
async def leave(team_id: str, session: Session = Depends(get_current_session)):
    return await teams.leave_team(session, team_id)


@router.delete("/teams/{team_id}")
async def delete(team_id: str, session: Session = Depends(get_current_session)):
    await teams.delete_team(session, team_id)
    return {"status": "deleted", "id": team_id}


@router.patch("/teams/{team_id}/max-members", response_model=Team)
async def set_max_members(
    team_id: str,
    req: MaxMembersRequest,
    session: Session = Depends(get_current_session),
):
    return await teams.update_max_members(session, team_id, req.max_members)


@router.post("/teams/{team_id}/remove", response_model=Team)
async def remove(team_id: str, req: TeamMemberRequest, session: Session = Depends(get_current_session)):
    return await teams.remove_member(session, team_id, req.user_id)


@router.post("/teams/{team_id}/transfer", response_model=Team)
async def transfer(team_id: str, req: TeamMemberRequest, session: Session = Depends(get_current_session)):
    return await teams.transfer_leadership(session, team_id, req.user_id)


@router.post("/master/teams/move", response_model=Team | None)
async def move_member(req: MoveMemberRequest, session: Session = Depends(require_master)):
    return await teams.master_move_member(session, req.user_id, req.username, req.team_id)
