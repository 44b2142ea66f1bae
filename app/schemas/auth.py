"""Pydantic schemas for registration and login."""
from pydantic import BaseModel


class RegisterSchema(BaseModel):
    full_name: str
    email: str
    password: str


class LoginSchema(BaseModel):
    email: str
    password: str


class TokenSchema(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
