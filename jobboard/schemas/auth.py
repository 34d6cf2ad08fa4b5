"""Authentication-related Pydantic schemas."""
from typing import Optional

from pydantic import EmailStr

from jobboard.schemas.base import EntityModel


class User(EntityModel):
    """The signed-in user as reported by the auth backend."""
    user_id: str
    user_name: str = ""
    email: str


class SignInRequest(EntityModel):
    """Request to start a session."""
    email: EmailStr
    user_name: Optional[str] = None


class SignOutResponse(EntityModel):
    message: str
