"""
API request and response models for AuthGate REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

Request fields default to "" rather than being required: a missing password
must reach verify_credentials() and come back as "Password is required"
(400), and a missing username on the reset routes must come back as
"Username doesn't exist" (200), not as a generic validation error.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auth.models import ResetOutcome

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /login."""

    username: str = Field(default="", max_length=255)
    password: str = Field(default="", max_length=255)


class ResetCheckRequest(BaseModel):
    """Request body for POST /forgot-password/check.

    No length limits and no type errors: these routes answer 200 for every
    body, so odd input has to reach the gate and fail there. Numbers are
    read as their text form for username (a numeric name can exist); any
    other non-string becomes "". adminCode must be a JSON string -- 667
    and "667" are different codes.
    """

    model_config = ConfigDict(populate_by_name=True)

    username: str = ""
    admin_code: str = Field(default="", alias="adminCode")

    @field_validator("username", mode="before")
    @classmethod
    def scalar_as_text(cls, value: Any) -> str:
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            return ""
        return str(value)

    @field_validator("admin_code", mode="before")
    @classmethod
    def string_only(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""


class ResetRequest(ResetCheckRequest):
    """Request body for POST /forgot-password/reset.

    A non-string newPassword becomes "" and is refused after the gate.
    """

    new_password: str = Field(default="", alias="newPassword")

    @field_validator("new_password", mode="before")
    @classmethod
    def password_string_only(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class LoginResponse(BaseModel):
    """Response for a successful POST /login."""

    model_config = ConfigDict(frozen=True)

    token: str


class ResetResponse(BaseModel):
    """Response for both /forgot-password routes (always HTTP 200)."""

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str

    @classmethod
    def from_outcome(cls, outcome: ResetOutcome) -> "ResetResponse":
        return cls(success=outcome.success, message=outcome.message)


class MessageResponse(BaseModel):
    """Error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    message: str


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
