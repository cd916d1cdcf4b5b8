"""Pydantic schemas for request and response validation.

Request fields are optional here on purpose: missing or blank fields are
reported by the stores as 400 errors rather than as 422 schema errors.
"""

import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class JokeCreate(BaseModel):
    """Schema for adding a new joke."""

    question: Optional[str] = Field(
        None,
        description="The setup of the joke",
        examples=["Why did the skeleton not fight anyone?"],
    )
    answer: Optional[str] = Field(
        None,
        description="The punchline",
        examples=["Because it didn't have the guts!"],
    )
    genre: Optional[str] = Field(
        None,
        description="Genre tag, matched exactly when filtering",
        examples=["funny"],
    )


class JokeUpdate(JokeCreate):
    """Partial update. Only fields with a value are changed."""


class JokeResponse(BaseModel):
    """Schema for a joke in API responses."""

    id: int
    question: str
    answer: str
    genre: str

    model_config = ConfigDict(from_attributes=True)


class RandomJokeResponse(BaseModel):
    joke: JokeResponse


class MessageResponse(BaseModel):
    message: str


class JokeMessageResponse(MessageResponse):
    """Confirmation message along with the affected joke."""

    joke: JokeResponse


class APIKeyResponse(BaseModel):
    """A newly issued API key, serialized as ``apiKey``."""

    api_key: str = Field(..., alias="apiKey")

    model_config = ConfigDict(populate_by_name=True)


class RegisterRequest(BaseModel):
    """Schema for registering a new user."""

    username: Optional[str] = Field(None, examples=["newuser"])
    password: Optional[str] = Field(None, examples=["s3cret"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    jokes: int
    api_keys: int
    users: int
    timestamp: datetime.datetime


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
