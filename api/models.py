"""
API request and response models for FieldBook REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
farm/models.py, which own the internal domain representation. Route handlers
map between the two.

Input validation lives here: enum membership for size_unit and status,
email syntax, non-empty strings. Workflows trust what they are given.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class SizeUnitEnum(str, Enum):
    plots = "Plots"
    acres = "Acres"
    hectares = "Hectares"


class FarmStatusEnum(str, Enum):
    planting = "Planting"
    cultivation = "Cultivation"
    harvesting = "Harvesting"


# ---------------------------------------------------------------------------
# Auth -- request models
#
# Passwords are taken byte-for-byte: register, reset and login must hash and
# verify the same string, so only identity fields are stripped.
# ---------------------------------------------------------------------------


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register."""

    email: EmailStr
    username: str = Field(min_length=1, max_length=255)
    firstname: str = Field(min_length=1, max_length=255)
    lastname: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=8, max_length=255)

    @field_validator("email", "username", "firstname", "lastname", mode="before")
    @classmethod
    def strip_identity(cls, v: Any) -> Any:
        return _strip(v)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=255)

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v: Any) -> Any:
        return _strip(v)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v: Any) -> Any:
        return _strip(v)


class VerifyTokenRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    token: str = Field(min_length=1, max_length=16)


class ResetPasswordRequest(BaseModel):
    """Request body for POST /api/v1/auth/reset-password.

    token is the code delivered by the send-reset-token notification. It is
    checked before the new password is written.
    """

    email: EmailStr
    token: str = Field(min_length=1, max_length=16)
    new_password: str = Field(
        min_length=8,
        max_length=255,
        validation_alias=AliasChoices("new_password", "newPassword"),
    )

    @field_validator("email", "token", mode="before")
    @classmethod
    def strip_identity(cls, v: Any) -> Any:
        return _strip(v)


# ---------------------------------------------------------------------------
# Farm -- request models
# ---------------------------------------------------------------------------


class Location(BaseModel):
    longitude: float = Field(ge=-180, le=180)
    latitude: float = Field(ge=-90, le=90)


class SoilInfo(BaseModel):
    """Soil description. Serialized with the camelCase keys clients send."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    soil_ph: float = Field(alias="soilpH", ge=0, le=14)
    soil_type: str = Field(alias="soilType", min_length=1, max_length=100)


class FarmCreate(BaseModel):
    """Request body for POST /api/v1/farms.

    soil is also accepted under the key "soilInfo".
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    location: Optional[Location] = None
    size: float = Field(gt=0)
    size_unit: SizeUnitEnum
    status: FarmStatusEnum
    soil: SoilInfo = Field(validation_alias=AliasChoices("soil", "soilInfo"))

    def to_fields(self) -> dict:
        """Flatten into the plain dict the farm workflow stores."""
        return {
            "name": self.name,
            "location": self.location.model_dump() if self.location else None,
            "size": self.size,
            "size_unit": self.size_unit.value,
            "status": self.status.value,
            "soil": self.soil.model_dump(by_alias=True),
        }


class FarmUpdate(FarmCreate):
    """Request body for PATCH /api/v1/farms/{farm_id}.

    Same shape as FarmCreate. An omitted location keeps the stored one; an
    explicit null clears it.
    """

    def to_fields(self) -> dict:
        fields = super().to_fields()
        if "location" not in self.model_fields_set:
            del fields["location"]
        return fields


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class EnvelopeResponse(BaseModel):
    """Uniform success envelope returned by every workflow route."""

    model_config = ConfigDict(frozen=True)

    message: str
    status: str
    statusCode: int
    data: Any = None


class LoginTokenResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    access_token: str


class MeResponse(BaseModel):
    """Response for GET /api/v1/auth/me."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    email: str
    username: str
    firstname: str
    lastname: str
    verified: bool


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
