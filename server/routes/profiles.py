"""Profile routes: setup, self-service edits, kills and master overrides."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from realm.models import Profile, Session
from server.auth import get_current_session, require_master
from server.models import (
    DeathRequest,
    KillRequest,
    MasterCharacterRequest,
    MasterProfileUpdateRequest,
    PlayerKillRequest,
    ProfileCreateRequest,
    ProfileUpdateRequest,
)
from server.profiles import profiles

router = APIRouter()


@router.post("/profiles", response_model=Profile, status_code=201)
async def create_profile(req: ProfileCreateRequest, session: Session = Depends(get_current_session)):
    return await profiles.create(session, req.model_dump(exclude_none=True))


@router.get("/profiles", response_model=list[Profile])
async def list_profiles(session: Session = Depends(require_master)):
    return await profiles.list_all()


@router.get("/profiles/me", response_model=Profile)
async def my_profile(session: Session = Depends(get_current_session)):
    return await profiles.require(session.user_id)


@router.get("/profiles/{profile_id}", response_model=Profile)
async def get_profile(profile_id: str, session: Session = Depends(get_current_session)):
    return await profiles.require(profile_id)


@router.patch("/profiles/{profile_id}", response_model=Profile)
async def update_profile(
    profile_id: str,
    req: ProfileUpdateRequest,
    session: Session = Depends(get_current_session),
):
    return await profiles.update(session, profile_id, req.model_dump(exclude_unset=True))


@router.delete("/profiles/{profile_id}")
async def delete_profile(profile_id: str, session: Session = Depends(get_current_session)):
    await profiles.delete(session, profile_id)
    return {"status": "deleted", "id": profile_id}


@router.post("/profiles/{profile_id}/kills", response_model=Profile)
async def kill_creature(
    profile_id: str,
    req: KillRequest,
    session: Session = Depends(get_current_session),
):
    return await profiles.kill_creature(
        session, profile_id,
        creatures_killed=req.creatures_killed,
        experience_gained=req.experience_gained,
        loot_gold=req.loot_gold,
    )


# --- Master panel ---


@router.patch("/master/profiles/{profile_id}", response_model=Profile)
async def master_update_profile(
    profile_id: str,
    req: MasterProfileUpdateRequest,
    session: Session = Depends(require_master),
):
    return await profiles.master_update(session, profile_id, req.model_dump(exclude_unset=True))


@router.post("/master/profiles/{profile_id}/deaths", response_model=Profile)
async def record_death(
    profile_id: str,
    req: DeathRequest,
    session: Session = Depends(require_master),
):
    return await profiles.record_death(session, profile_id, cause=req.cause, deceased=req.deceased)


@router.post("/master/profiles/{profile_id}/player-kills", response_model=Profile)
async def record_player_kill(
    profile_id: str,
    req: PlayerKillRequest,
    session: Session = Depends(require_master),
):
    return await profiles.record_player_kill(session, profile_id, count=req.count)


@router.post("/master/characters", response_model=Profile, status_code=201)
async def create_master_character(req: MasterCharacterRequest, session: Session = Depends(require_master)):
    return await profiles.create_master_character(session, req.model_dump(exclude_none=True))


@router.get("/master/characters", response_model=list[Profile])
async def list_master_characters(session: Session = Depends(require_master)):
    return await profiles.list_master_characters(session)
