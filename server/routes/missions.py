"""Mission routes: the board, per-user accept/complete, master authoring."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from realm.errors import NotFoundError
from realm.models import Mission, Session
from server import missions
from server.auth import get_current_session, require_master
from server.models import CompletionResponse, MissionCreateRequest, MissionUpdateRequest

router = APIRouter()


@router.get("/missions", response_model=list[Mission])
async def available_missions(session: Session = Depends(get_current_session)):
    return await missions.list_available_missions()


@router.get("/missions/all", response_model=list[Mission])
async def all_missions(session: Session = Depends(get_current_session)):
    return await missions.list_missions()


@router.get("/missions/mine", response_model=list[Mission])
async def my_missions(session: Session = Depends(get_current_session)):
    return await missions.list_accepted_missions(session.user_id)


@router.get("/missions/{mission_id}", response_model=Mission)
async def get_mission(mission_id: str, session: Session = Depends(get_current_session)):
    mission = await missions.get_mission(mission_id)
    if mission is None:
        raise NotFoundError("Mission not found")
    return mission


@router.post("/missions/{mission_id}/accept", response_model=Mission)
async def accept(mission_id: str, session: Session = Depends(get_current_session)):
    return await missions.accept_mission(session, mission_id)


@router.post("/missions/{mission_id}/complete", response_model=CompletionResponse)
async def complete(mission_id: str, session: Session = Depends(get_current_session)):
    result = await missions.complete_mission(session, mission_id)
    return CompletionResponse(
        mission=result.mission,
        reward_granted=result.reward_granted,
        profile=result.profile,
    )


@router.post("/missions", response_model=Mission, status_code=201)
async def create_mission(req: MissionCreateRequest, session: Session = Depends(require_master)):
    return await missions.create_mission(
        session,
        title=req.title,
        description=req.description,
        difficulty=req.difficulty,
        reward=req.reward,
        requirements=req.requirements,
    )


@router.patch("/missions/{mission_id}", response_model=Mission)
async def update_mission(
    mission_id: str,
    req: MissionUpdateRequest,
    session: Session = Depends(require_master),
):
    return await missions.update_mission(session, mission_id, req.model_dump(mode="json", exclude_unset=True))


@router.delete("/missions/{mission_id}")
async def delete_mission(mission_id: str, session: Session = Depends(require_master)):
    await missions.delete_mission(session, mission_id)
    return {"status": "deleted", "id": mission_id}
