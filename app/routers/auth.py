"""Auth routes: register and login, both returning a bearer token."""
import re
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InvalidInputError, UnauthenticatedError
from app.core.security import create_access_token, hash_password, verify_password
from app.db.session import get_db
from app.models.user import User
from app.schemas.auth import LoginSchema, RegisterSchema, TokenSchema

router = APIRouter(prefix="/auth", tags=["auth"])

# Simple, practical email check
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


@router.post("/register", response_model=TokenSchema, status_code=201)
async def register(body: RegisterSchema, db: Annotated[AsyncSession, Depends(get_db)]):
    """Create a user and return a token for it."""
    email_norm = _normalize_email(body.email)
    pwd = body.password or ""

    if not body.full_name.strip():
        raise InvalidInputError("Full name is required")
    if not email_norm or not EMAIL_RE.match(email_norm):
        raise InvalidInputError("Invalid email")
    if len(pwd) < 8:
        raise InvalidInputError("Password must be at least 8 characters")
    # bcrypt hard limit: 72 bytes (UTF-8)
    if len(pwd.encode("utf-8")) > 72:
        raise InvalidInputError("Password is too long")

    result = await db.execute(select(User).where(User.email == email_norm))
    if result.scalar_one_or_none():
        raise InvalidInputError("Email already registered")

    user = User(full_name=body.full_name.strip(), email=email_norm, hashed_password=hash_password(pwd))
    db.add(user)
    await db.commit()
    await db.refresh(user)

    return TokenSchema(access_token=create_access_token(user.id), user_id=user.id)


@router.post("/login", response_model=TokenSchema)
async def login(body: LoginSchema, db: Annotated[AsyncSession, Depends(get_db)]):
    result = await db.execute(select(User).where(User.email == _normalize_email(body.email)))
    user = result.scalar_one_or_none()
    if not user or not verify_password(body.password, user.hashed_password):
        raise UnauthenticatedError("Invalid email or password")
    return TokenSchema(access_token=create_access_token(user.id, {"role": user.role}), user_id=user.id)
