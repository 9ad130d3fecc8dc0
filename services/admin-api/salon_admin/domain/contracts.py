"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class CreateUserInput:
    """Inputs required to create an account and its profile row."""

    email: str
    password: str
    name: str
    role: str
    color: str | None = None


@dataclass(slots=True)
class UpdateProfileInput:
    """Full replacement of the mutable profile fields."""

    name: str
    role: str
    color: str
