"""Identity and authorization models.

``users/{email}`` holds the authorization record. Only an administrator
with direct store access flips ``authorized`` (see set_authorized.py).
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Identity(BaseModel):
    model_config = ConfigDict(frozen=True)

    uid: str
    # Taken as the token carries it; it is only used as a document id
    email: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_claims(cls, claims: dict) -> "Identity":
        """Build from decoded Firebase ID token claims."""
        email = claims.get("email")
        name = claims.get("name")
        return cls(
            uid=str(claims.get("uid") or claims.get("sub") or ""),
            email=email if isinstance(email, str) and email else None,
            name=name if isinstance(name, str) and name else None,
        )


class AuthorizationRecord(BaseModel):
    name: str = "User"
    authorized: bool = False

    # Capability flags, stored but not enforced anywhere
    acupuncture: bool = False
    tuina: bool = False
    pro: bool = False

    registered_at: Optional[Any] = None

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, v):
        if v is None or v == "":
            return "User"
        return v if isinstance(v, str) else str(v)

    @field_validator("authorized", "acupuncture", "tuina", "pro", mode="before")
    @classmethod
    def strict_flag(cls, v):
        # Only a real boolean true grants anything; "true", 1, "yes" do not
        return v is True
