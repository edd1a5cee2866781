from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from .common import ConsoleBaseModel, ConsoleResource


class RoleInfo(ConsoleResource):
    name: str
    user_count: int = Field(default=0, alias="userCount")


class UserInfo(ConsoleResource):
    user_name: str | None = Field(default=None, alias="userName")
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    first_name_fa: str | None = Field(default=None, alias="firstNameFa")
    last_name_fa: str | None = Field(default=None, alias="lastNameFa")
    roles: tuple[str, ...] = ()
    is_disabled: bool = Field(default=False, alias="isDisabled")

    @field_validator("roles", mode="before")
    @classmethod
    def _coerce_roles(cls, value: Any) -> Any:
        if value is None:
            return ()
        return value

    def display_name(self, language: str = "en") -> str:
        """Return the localized full name, falling back to the user name."""

        if language == "fa" and self.first_name_fa and self.last_name_fa:
            return f"{self.first_name_fa} {self.last_name_fa}"
        full = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return full or self.user_name or ""


class UserDraft(ConsoleBaseModel):
    """Editable user fields shared by the add and edit dialogs.

    Drafts are updated with ``model_copy`` while the operator types, which
    skips validation; ``validated`` re-checks the length rules before submit.
    ``password`` is only sent when creating a user.
    """

    user_name: str = Field(default="", alias="userName", min_length=3, max_length=50)
    first_name: str = Field(default="", alias="firstName", min_length=1, max_length=50)
    last_name: str = Field(default="", alias="lastName", min_length=1, max_length=50)
    first_name_fa: str | None = Field(default=None, alias="firstNameFa", max_length=50)
    last_name_fa: str | None = Field(default=None, alias="lastNameFa", max_length=50)
    password: str | None = Field(default=None, min_length=6, max_length=100)

    @classmethod
    def from_user(cls, user: UserInfo) -> "UserDraft":
        return cls.model_construct(
            user_name=user.user_name or "",
            first_name=user.first_name or "",
            last_name=user.last_name or "",
            first_name_fa=user.first_name_fa,
            last_name_fa=user.last_name_fa,
            password=None,
        )

    @classmethod
    def empty(cls) -> "UserDraft":
        return cls.model_construct(
            user_name="",
            first_name="",
            last_name="",
            first_name_fa=None,
            last_name_fa=None,
            password=None,
        )

    def validated(self) -> "UserDraft":
        """Return a validated copy, raising ``ValidationError`` on bad input."""

        return type(self).model_validate(self.model_dump())

    def to_register_payload(self) -> dict[str, Any]:
        payload = self.validated().to_api()
        if not self.password:
            raise ValueError("A password is required when creating a user")
        payload["confirmPassword"] = self.password
        payload.setdefault("firstNameFa", "")
        payload.setdefault("lastNameFa", "")
        return payload

    def to_edit_payload(self) -> dict[str, Any]:
        payload = self.validated().to_api()
        payload.pop("password", None)
        return payload


__all__ = ["RoleInfo", "UserInfo", "UserDraft"]
