"""
Session context passed into the catalog core.
"""

from pydantic import BaseModel

from .enums import Role


class SessionContext(BaseModel):
    """Identities used to scope per-user fetches and to stamp created products."""

    buyer_id: str
    seller_id: str
    email: str | None = None
    role: Role | None = None
