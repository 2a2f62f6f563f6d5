"""Character sheet routes: any number of free-form characters per user."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from realm.models import Profile, Session
from server.auth import get_current_session
from server.models import KillRequest, ProfileCreateRequest, ProfileUpdateRequest
from server.profiles import characters

router = APIRouter()


@router.post("/characters", response_model=Profile, status_code=201)
async def create_character(req: ProfileCreateRequest, session: Session = Depends(get_current_session)):
    return await characters.create(session, req.model_dump(exclude_none=True))


@router.get("/characters", response_model=list[Profile])
async def list_characters(session: Session = Depends(get_current_session)):
    return await characters.list_for_user(session.user_id)


@router.get("/characters/{character_id}", response_model=Profile)
async def get_character(character_id: str, session: Session = Depends(get_current_session)):
    return await characters.require(character_id)


@router.patch("/characters/{character_id}", response_model=Profile)
async def update_character(
    character_id: str,
    req: ProfileUpdateRequest,
    session: Session = Depends(get_current_session),
):
    return await characters.update(session, character_id, req.model_dump(exclude_unset=True))


@router.delete("/characters/{character_id}")
async def delete_character(character_id: str, session: Session = Depends(get_current_session)):
    await characters.delete(session, character_id)
    return {"status": "deleted", "id": character_id}


@router.post("/characters/{character_id}/kills", response_model=Profile)
async def kill_creature(
    character_id: str,
    req: KillRequest,
    session: Session = Depends(get_current_session),
):
    return await characters.kill_creature(
        session, character_id,
        creatures_killed=req.creatures_killed,
        experience_gained=req.experience_gained,
        loot_gold=req.loot_gold,
    )
