"""
Auth API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from . import dependencies, schemas, service

router = APIRouter(prefix="/auth")


@router.post("/login")
async def login(request: schemas.LoginRequest) -> schemas.LoginResponse:
    return await service.login(request)


@router.get("/me")
async def me(access_token: str = Depends(dependencies.get_bearer_token)) -> schemas.UserResponse:
    return await service.me(access_token)
