"""Agent routes: the recruitable roster and the caller's recruits."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from realm.models import Agent, RecruitedAgent, Session
from server import recruitment
from server.auth import get_current_session, require_master
from server.models import AgentCreateRequest, AgentUpdateRequest, RecruitRequest

router = APIRouter()


@router.get("/agents", response_model=list[Agent])
async def list_agents(session: Session = Depends(get_current_session)):
    return await recruitment.list_agents()


@router.get("/agents/recruited", response_model=list[RecruitedAgent])
async def list_recruited(session: Session = Depends(get_current_session)):
    return await recruitment.list_recruited_agents(session.user_id)


@router.post("/agents/{agent_id}/recruit", response_model=RecruitedAgent, status_code=201)
async def recruit(agent_id: str, req: RecruitRequest, session: Session = Depends(get_current_session)):
    return await recruitment.recruit_agent(session, agent_id, profile_id=req.profile_id)


@router.post("/agents", response_model=Agent, status_code=201)
async def create_agent(req: AgentCreateRequest, session: Session = Depends(require_master)):
    return await recruitment.create_agent(session, req.model_dump())


@router.patch("/agents/{agent_id}", response_model=Agent)
async def update_agent(agent_id: str, req: AgentUpdateRequest, session: Session = Depends(require_master)):
    return await recruitment.update_agent(session, agent_id, req.model_dump(exclude_unset=True))


@router.delete("/agents/{agent_id}")
async def delete_agent(agent_id: str, session: Session = Depends(require_master)):
    await recruitment.delete_agent(session, agent_id)
    return {"status": "deleted", "id": agent_id}
