"""User type definitions."""

from datetime import datetime
from typing import TypedDict


class User(TypedDict):
    """User table row, keyed by the identity provider subject."""

    id: str
    email: str
    first_name: str | None
    last_name: str | None
    image_url: str | None
    created_at: datetime
