"""
Role resolution from an email address.

This is a post-authentication step only: callers must verify credentials first
(see ``market.accounts.authenticate``).
"""

from typing import Any

from models.enums import Role

# Suffix -> role, checked in order
ROLE_DOMAINS: tuple[tuple[str, Role], ...] = (
    ("@gmail.com", Role.BUYER),
    ("@veggistore.com", Role.SELLER),
    ("@ranbidge.com", Role.ADMIN),
)


def resolve_role(email: Any) -> Role:
    """Map an email address to a role by its domain suffix; never raises."""
    if not isinstance(email, str):
        return Role.INVALID
    for suffix, role in ROLE_DOMAINS:
        if email.endswith(suffix):
            return role
    return Role.INVALID


def domain_for(role: Role) -> str | None:
    """Email suffix required for accounts of ``role``."""
    for suffix, candidate in ROLE_DOMAINS:
        if candidate is role:
            return suffix
    return None
