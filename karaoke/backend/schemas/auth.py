"""Schema for the Supabase user resolved from a request's bearer token."""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class AuthUser(BaseModel):
    id: str
    email: str = ""
    user_metadata: Dict[str, Any] = Field(default_factory=dict)
    app_metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def full_name(self) -> Optional[str]:
        return self.user_metadata.get("full_name") or None

    @property
    def display_name(self) -> str:
        return self.full_name or self.email
