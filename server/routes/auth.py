"""Auth routes: sign-up, sign-in, sign-out and the current user."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from realm.models import Session
from server.auth import bearer_token, get_current_session, get_identity, is_master_email
from server.models import AuthResponse, MeResponse, SignInRequest, SignUpRequest

router = APIRouter()


@router.post("/auth/signup", response_model=AuthResponse, status_code=201)
async def signup(req: SignUpRequest):
    user, token = await get_identity().sign_up(req.email, req.password, req.display_name)
    return AuthResponse(
        user_id=user.id,
        email=user.email,
        display_name=user.display_name,
        is_master=is_master_email(user.email),
        token=token,
    )


@router.post("/auth/signin", response_model=AuthResponse)
async def signin(req: SignInRequest):
    user, token = await get_identity().sign_in(req.email, req.password)
    return AuthResponse(
        user_id=user.id,
        email=user.email,
        display_name=user.display_name,
        is_master=is_master_email(user.email),
        token=token,
    )


@router.post("/auth/signout")
async def signout(request: Request, session: Session = Depends(get_current_session)):
    await get_identity().sign_out(bearer_token(request))
    return {"status": "signed_out"}


@router.get("/auth/me", response_model=MeResponse)
async def me(request: Request):
    user = await get_identity().current_user(bearer_token(request))
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid or expired session")
    return MeResponse(
        user_id=user.id,
        email=user.email,
        display_name=user.display_name,
        is_master=is_master_email(user.email),
    )
