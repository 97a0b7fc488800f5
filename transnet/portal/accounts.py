"""
User registration and login.
"""

import re
from typing import Optional

import structlog
from pydantic import BaseModel, Field, ValidationInfo, field_validator

from transnet.models.records import (
    Membership,
    MembershipRole,
    MembershipStatus,
    User,
    utc_now,
)
from transnet.portal.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    PortalError,
)
from transnet.portal.security import hash_password, verify_password
from transnet.storage.postgres_client import PortalStore

logger = structlog.get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class RegistrationForm(BaseModel):
    """Registration form fields."""

    model_config = {"frozen": True, "str_strip_whitespace": True}

    username: str = Field(..., min_length=3)
    email: str
    password: str = Field(..., min_length=6)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    organization_slug: Optional[str] = None

    @field_validator("username", mode="before")
    @classmethod
    def check_username(cls, v: Optional[str]) -> str:
        if v is None or len(str(v).strip()) < 3:
            raise ValueError("Username must be at least 3 characters")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email address")
        return v.lower()

    @field_validator("password", mode="before")
    @classmethod
    def check_password(cls, v: Optional[str]) -> str:
        if v is None or len(str(v)) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v

    @field_validator("first_name", "last_name", "organization_slug")
    @classmethod
    def blank_optional(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class LoginForm(BaseModel):
    """Login form fields."""

    model_config = {"frozen": True, "str_strip_whitespace": True}

    username: str
    password: str
    organization_slug: Optional[str] = None

    @field_validator("username", "password", mode="before")
    @classmethod
    def required(cls, v: Optional[str], info: ValidationInfo) -> str:
        if v is None or not str(v).strip():
            label = "Username" if info.field_name == "username" else "Password"
            raise ValueError(f"{label} is required")
        return v

    @field_validator("organization_slug")
    @classmethod
    def blank_optional(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


async def register_user(store: PortalStore, form: RegistrationForm) -> User:
    """
    Create a user account.

    When an organization slug is given the user joins it as a member and it
    becomes their current organization.

    Raises:
        ConflictError: If the username or email is taken.
        NotFoundError: If the organization slug does not exist.
    """
    if await store.get_user_by_username(form.username) is not None:
        raise ConflictError("Username already exists")
    if await store.get_user_by_email(form.email) is not None:
        raise ConflictError("Email already exists")

    organization = None
    if form.organization_slug:
        organization = await store.get_organization_by_slug(form.organization_slug)
        if organization is None:
            raise NotFoundError("Organization not found")

    user = User(
        username=form.username,
        email=form.email,
        password_hash=hash_password(form.password),
        first_name=form.first_name,
        last_name=form.last_name,
        current_organization_id=organization.id if organization else None,
    )
    await store.create_user(user)

    if organization is not None:
        await store.create_membership(
            Membership(
                user_id=user.id,
                organization_id=organization.id,
                role=MembershipRole.MEMBER,
                status=MembershipStatus.ACTIVE,
            )
        )

    logger.info("user_registered", user_id=user.id, with_organization=bool(organization))
    return user


async def authenticate_user(store: PortalStore, form: LoginForm) -> User:
    """
    Check credentials and record the login.

    When an organization slug is given the user must be an active member,
    and it becomes their current organization.

    Raises:
        PortalError: For unknown users, inactive users, or wrong passwords
            (one message for all three).
        NotFoundError: If the organization slug does not exist.
        PermissionDeniedError: If the user is not a member of it.
    """
    user = await store.get_user_by_username(form.username)
    if user is None or not user.is_active or not verify_password(
        form.password, user.password_hash
    ):
        logger.info("login_failed", username=form.username)
        raise PortalError("Invalid credentials")

    if form.organization_slug:
        organization = await store.get_organization_by_slug(form.organization_slug)
        if organization is None:
            raise NotFoundError("Organization not found")
        membership = await store.get_membership(user.id, organization.id)
        if membership is None or membership.status != MembershipStatus.ACTIVE:
            raise PermissionDeniedError("User is not a member of this organization")
        await store.set_current_organization(user.id, organization.id)
        user = user.model_copy(update={"current_organization_id": organization.id})

    now = utc_now()
    await store.touch_login(user.id, now)
    logger.info("login_succeeded", user_id=user.id)
    return user.model_copy(update={"last_login_at": now})
