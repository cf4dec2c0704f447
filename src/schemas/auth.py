"""Authentication schemas for JWT tokens and user context."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserContext(BaseModel):
    """Authenticated user context extracted from JWT token.

    This model represents the authenticated user for the current request
    or WebSocket connection. It is populated from the validated JWT.
    """

    model_config = ConfigDict(from_attributes=True)

    user_id: str = Field(description="Identity provider subject (JWT sub claim)")
    session_id: str | None = Field(default=None, description="Identity provider session id (JWT sid claim)")
    email: str | None = Field(default=None, description="User's email address if available")


class TokenPayload(BaseModel):
    """JWT token payload structure for identity provider tokens."""

    model_config = ConfigDict(from_attributes=True)

    sub: str = Field(description="Subject - the user's identity provider id")
    sid: str | None = Field(default=None, description="Session id")
    email: str | None = Field(default=None, description="User's email address")
    exp: int = Field(description="Expiration timestamp (Unix epoch)")
    iat: int = Field(description="Issued at timestamp (Unix epoch)")
    iss: str | None = Field(default=None, description="Issuer - token issuer URL")

    @property
    def expiration_datetime(self) -> datetime:
        """Get expiration as datetime object."""
        return datetime.fromtimestamp(self.exp)

    def to_user_context(self) -> UserContext:
        """Convert token payload to UserContext.

        Returns:
            UserContext: User context derived from token claims.
        """
        return UserContext(
            user_id=self.sub,
            session_id=self.sid,
            email=self.email,
        )
