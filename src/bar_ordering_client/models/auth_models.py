"""Staff identity models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class StaffRole(str, Enum):
    """Roles the backend assigns to staff accounts."""

    ADMIN = "ADMIN"
    WAITER = "WAITER"
    BARTENDER = "BARTENDER"
    CHEF = "CHEF"


class StaffUser(BaseModel):
    """Profile of the logged-in staff member."""

    username: str = Field(..., description="Login name")
    email: str | None = Field(None, description="Contact e-mail")
    roles: list[str] = Field(default_factory=list, description="Role names, e.g. ADMIN")

    def has_role(self, role: StaffRole | str) -> bool:
        name = role.value if isinstance(role, StaffRole) else role
        return name.upper() in {r.upper() for r in self.roles}

    def to_storage(self) -> dict[str, Any]:
        return {"username": self.username, "email": self.email, "roles": list(self.roles)}

    @classmethod
    def from_api_payload(cls, data: dict[str, Any]) -> "StaffUser":
        return cls(
            username=data["username"],
            email=data.get("email"),
            roles=[str(role) for role in data.get("roles") or []],
        )
