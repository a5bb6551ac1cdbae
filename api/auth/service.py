"""
Auth business logic.
"""

from __future__ import annotations

import asyncpg
from fastapi import HTTPException, status

from . import repository, schemas, security


def _to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=int(user_row["id"]),
        email=str(user_row["email"]),
        role=str(user_row["role"]),
        is_active=bool(user_row["is_active"]),
        created_at=user_row["created_at"],
    )


async def login(payload: schemas.LoginRequest) -> schemas.LoginResponse:
    user_row = await repository.get_user_by_email(payload.email)
    if user_row is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )

    is_valid = security.verify_password(payload.password, str(user_row.get("password_hash") or ""))
    if not is_valid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )

    if not bool(user_row.get("is_active", False)):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is inactive.",
        )

    access_token = security.build_access_token(
        user_id=int(user_row["id"]),
        email=str(user_row["email"]),
        role=str(user_row["role"]),
    )
    return schemas.LoginResponse(
        user=_to_user_response(user_row),
        token=schemas.TokenResponse(
            access_token=access_token,
            expires_in=security.access_token_expire_minutes() * 60,
        ),
    )


async def get_user_from_access_token(access_token: str) -> dict:
    try:
        payload = security.decode_access_token(access_token)
    except security.AuthSecurityError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc

    subject = str(payload.get("sub") or "").strip()
    if not subject.isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid access token subject.",
        )

    # Role is re-read from the DB so demotions take effect before token expiry.
    user_row = await repository.get_user_by_id(int(subject))
    if user_row is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found.",
        )
    if not bool(user_row.get("is_active", False)):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is inactive.",
        )
    return user_row


async def me(access_token: str) -> schemas.UserResponse:
    user_row = await get_user_from_access_token(access_token)
    return _to_user_response(user_row)


async def create_user(*, email: str, password: str, role: str) -> schemas.UserResponse:
    """
    Create an admin account. Used by the management command, not exposed over HTTP.
    """
    if role not in security.ROLES:
        raise ValueError(f"Unknown role '{role}'. Allowed: {', '.join(security.ROLES)}.")
    try:
        user_row = await repository.create_user(
            email=email,
            password_hash=security.hash_password(password),
            role=role,
        )
    except asyncpg.UniqueViolationError as exc:
        raise ValueError(f"Email {email} is already registered.") from exc
    return _to_user_response(user_row)
