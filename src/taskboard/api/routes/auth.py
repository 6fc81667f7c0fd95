"""``/auth`` - registration, login and profile."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, status

from taskboard.api.dependencies import CurrentUserId, Service
from taskboard.api.schemas import LoginRequest, RegisterRequest

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, svc: Service) -> dict[str, Any]:
    result = await svc.register_user(
        name=body.name,
        email=body.email,
        password=body.password,
        country=body.country,
    )
    return {"success": True, "user": result.model_dump_public()}


@router.post("/login")
async def login(body: LoginRequest, svc: Service) -> dict[str, Any]:
    result = await svc.login(email=body.email, password=body.password)
    return {"success": True, "user": result.model_dump_public()}


@router.get("/profile")
async def profile(user_id: CurrentUserId, svc: Service) -> dict[str, Any]:
    user = await svc.get_profile(user_id)
    return {"success": True, "user": user.model_dump(mode="json")}
