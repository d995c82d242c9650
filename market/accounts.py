"""
Account registration and credential verification.

Registration enforces the marketplace signup rules (buyers use @gmail.com,
sellers @veggistore.com and must name their business). ``authenticate``
verifies credentials through a ``CredentialVerifier`` before deriving the role
from the email address.
"""

import logging
import re
from datetime import datetime
from typing import Protocol

from passlib.context import CryptContext
from pydantic import BaseModel, Field

from models.enums import Role

from .exceptions import AuthenticationError, RegistrationError
from .roles import domain_for, resolve_role

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

PHONE_PATTERN = re.compile(r"^[6-9]\d{9}$")
INVALID_DOMAIN_MESSAGE = "Invalid email domain. Use @gmail.com, @veggistore.com, or @ranbidge.com"


class CredentialVerifier(Protocol):
    def verify(self, email: str, password: str) -> bool: ...


class SignupRequest(BaseModel):
    account_type: Role
    name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    phone: str = ""
    address: str = ""
    business_name: str = ""  # Sellers only


class RegisteredUser(BaseModel):
    name: str
    email: str
    password_hash: str = Field(repr=False)
    role: Role
    phone: str = ""
    address: str = ""
    business_name: str | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.now)


def normalize_phone(phone: str) -> str:
    return re.sub(r"[^0-9]", "", phone)


class AccountRegistry:
    """In-memory user registry; implements ``CredentialVerifier``."""

    def __init__(self):
        self._users: dict[str, RegisteredUser] = {}

    def __len__(self) -> int:
        return len(self._users)

    def __contains__(self, email: object) -> bool:
        return email in self._users

    @property
    def users(self) -> list[RegisteredUser]:
        return list(self._users.values())

    def get(self, email: str) -> RegisteredUser | None:
        return self._users.get(email)

    def register(self, request: SignupRequest) -> RegisteredUser:
        """Validate a signup and store the new buyer or seller account."""
        if request.account_type not in (Role.BUYER, Role.SELLER):
            raise RegistrationError("Only buyer and seller accounts can sign up")
        required = (
            request.name,
            request.email,
            request.password,
            request.confirm_password,
            request.phone,
            request.address,
        )
        if not all(required):
            raise RegistrationError("Please fill in all fields")
        if request.password != request.confirm_password:
            raise RegistrationError("Passwords do not match")
        if not PHONE_PATTERN.match(normalize_phone(request.phone)):
            raise RegistrationError("Please enter a valid 10-digit phone number starting with 6, 7, 8, or 9")

        domain = domain_for(request.account_type)
        if not request.email.endswith(domain):
            raise RegistrationError(f"{request.account_type.value.capitalize()} email must end with {domain}")
        if request.account_type is Role.SELLER and not request.business_name:
            raise RegistrationError("Please enter your business name")
        if request.email in self._users:
            raise RegistrationError("Email already registered")

        user = self._store(
            name=request.name,
            email=request.email,
            password=request.password,
            role=request.account_type,
            phone=request.phone,
            address=request.address,
            business_name=request.business_name if request.account_type is Role.SELLER else None,
        )
        logger.info(f"Registered {user.role.value} account {user.email}")
        return user

    def add_user(self, name: str, email: str, password: str, phone: str = "", address: str = "") -> RegisteredUser:
        """Create an account directly (admin tool); the role follows the email domain."""
        if not name or not email or not password:
            raise RegistrationError("Please fill all fields")
        role = resolve_role(email)
        if role is Role.INVALID:
            raise RegistrationError(INVALID_DOMAIN_MESSAGE)
        if email in self._users:
            raise RegistrationError("Email already registered")
        return self._store(name=name, email=email, password=password, role=role, phone=phone, address=address)

    def remove_user(self, email: str) -> bool:
        return self._users.pop(email, None) is not None

    def edit_user(
        self,
        email: str,
        name: str | None = None,
        role: Role | None = None,
        phone: str | None = None,
        address: str | None = None,
    ) -> RegisteredUser:
        """Admin edit of an existing account. Login routing still follows the email domain."""
        user = self._users.get(email)
        if user is None:
            raise RegistrationError(f"No account for {email}")
        if name is not None and not name.strip():
            raise RegistrationError("Name cannot be empty")
        if role is Role.INVALID:
            raise RegistrationError("Invalid role")
        changes = {"name": name, "role": role, "phone": phone, "address": address}
        for attribute, value in changes.items():
            if value is not None:
                setattr(user, attribute, value)
        logger.info(f"Updated account {email}")
        return user

    def set_active(self, email: str, active: bool) -> RegisteredUser:
        user = self._users.get(email)
        if user is None:
            raise RegistrationError(f"No account for {email}")
        user.is_active = active
        return user

    def verify(self, email: str, password: str) -> bool:
        user = self._users.get(email)
        if user is None or not user.is_active:
            return False
        return pwd_context.verify(password, user.password_hash)

    def _store(self, password: str, **fields) -> RegisteredUser:
        user = RegisteredUser(password_hash=pwd_context.hash(password), **fields)
        self._users[user.email] = user
        return user


def authenticate(email: str, password: str, verifier: CredentialVerifier) -> Role:
    """Verify credentials, then derive the dashboard role from the email suffix."""
    if not email or not password:
        raise AuthenticationError("Please enter email and password")
    if not verifier.verify(email, password):
        logger.warning(f"Failed login for {email}")
        raise AuthenticationError("Invalid email or password")
    role = resolve_role(email)
    if role is Role.INVALID:
        raise AuthenticationError(INVALID_DOMAIN_MESSAGE)
    return role
