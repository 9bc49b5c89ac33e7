"""Pydantic models for the public API surface."""

from __future__ import annotations

from pydantic import BaseModel, Field


class CredentialsRequest(BaseModel):
    username: str = Field(..., min_length=1, description="Account name")
    password: str = Field(..., min_length=1, description="Plaintext password, hashed before storage")


class UserSummary(BaseModel):
    username: str


class SignupResponse(BaseModel):
    message: str
    user: UserSummary


class SigninResponse(BaseModel):
    token: str
    username: str


class ProtectedResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str


__all__ = [
    "CredentialsRequest",
    "ErrorResponse",
    "ProtectedResponse",
    "SigninResponse",
    "SignupResponse",
    "UserSummary",
]
