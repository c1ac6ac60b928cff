"""
Permission Table Models

Pydantic models for a tenant's permission table:

    roles:       {roleKey: {modules: {module: {page: {view, edit, delete}}}}}
    departments: {deptKey: {modules: {...}}}
    defaultRole, defaultDepartment
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Action(str, Enum):
    """Actions a page grant covers."""

    VIEW = "view"
    EDIT = "edit"
    DELETE = "delete"


class Permission(BaseModel):
    """Grant for one page."""

    view: bool = False
    edit: bool = False
    delete: bool = False

    @field_validator("view", "edit", "delete", mode="before")
    @classmethod
    def _deny_unless_bool(cls, value: Any) -> bool:
        # Stored cells may hold null or free text; only a real boolean grants
        return value if isinstance(value, bool) else False

    def allows(self, action: Action | str) -> bool:
        return bool(getattr(self, Action(action).value))


FULL_ACCESS = Permission(view=True, edit=True, delete=True)


class RoleGrants(BaseModel):
    """Module → page → Permission grants for a role or a department."""

    modules: dict[str, dict[str, Permission]] = Field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Any) -> "RoleGrants":
        """
        Parse a stored role or department entry.

        Accepts `{modules: {...}}` and the bare `{module: {...}}` form.
        Non-mapping modules or pages are skipped.
        """
        if not isinstance(raw, dict):
            return cls()
        modules = raw.get("modules") if isinstance(raw.get("modules"), dict) else raw

        parsed: dict[str, dict[str, Permission]] = {}
        for module, pages in modules.items():
            if not isinstance(pages, dict):
                continue
            parsed[module] = {
                page: Permission.model_validate(cell)
                for page, cell in pages.items()
                if isinstance(cell, dict)
            }
        return cls(modules=parsed)


class PermissionTable(BaseModel):
    """A tenant's permission table."""

    model_config = ConfigDict(populate_by_name=True)

    roles: dict[str, RoleGrants] = Field(default_factory=dict)
    departments: dict[str, RoleGrants] = Field(default_factory=dict)
    default_role: str = Field("staff", alias="defaultRole")
    default_department: str = Field("front-of-house", alias="defaultDepartment")

    @field_validator("roles", "departments")
    @classmethod
    def _lower_keys(cls, value: dict[str, RoleGrants]) -> dict[str, RoleGrants]:
        return {str(key).strip().lower(): grants for key, grants in value.items()}

    @classmethod
    def from_raw(cls, raw: dict[str, Any] | None) -> "PermissionTable":
        """Parse a stored permission table."""
        if not isinstance(raw, dict):
            return cls()
        roles = raw.get("roles") if isinstance(raw.get("roles"), dict) else {}
        departments = raw.get("departments") if isinstance(raw.get("departments"), dict) else {}
        return cls(
            roles={str(k): RoleGrants.from_raw(v) for k, v in roles.items()},
            departments={str(k): RoleGrants.from_raw(v) for k, v in departments.items()},
            default_role=raw.get("defaultRole") or raw.get("default_role") or "staff",
            default_department=(
                raw.get("defaultDepartment") or raw.get("default_department") or "front-of-house"
            ),
        )
