# app/models/users.py

from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class LoginCredentials(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)


class SessionUser(BaseModel):
    """The authenticated subject; never carries the password hash."""

    id: UUID
    name: str
    email: str


class LoginForm(BaseModel):
    email: str
    password: str
