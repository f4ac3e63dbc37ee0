"""Identity schemas."""

from pydantic import BaseModel


class AuthenticatedUser(BaseModel):
    """Caller identity resolved from the bearer token."""

    id: int
    email: str = ""
    full_name: str = ""
    role_id: int | None = None
