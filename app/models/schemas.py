from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import (
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    TypeAdapter,
    ValidationError,
    field_validator,
)


_url_adapter = TypeAdapter(AnyUrl)


def is_absolute_url(value: str) -> bool:
    try:
        _url_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


class Tone(str, Enum):
    PROFESSIONAL = "professional"
    FRIENDLY = "friendly"
    FORMAL = "formal"


class ModelPreference(str, Enum):
    OPENAI = "openai"
    GEMINI = "gemini"
    CLAUDE = "claude"
    GROK = "grok"


class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_description: str = Field(..., alias="jobDescription", min_length=1, max_length=5000)
    tone: Tone = Tone.PROFESSIONAL
    key_points: list[str] = Field(default_factory=list, alias="keyPoints")
    max_length: StrictInt = Field(default=2000, alias="maxLength", ge=100, le=5000)
    generate_diagram: StrictBool = Field(default=False, alias="generateDiagram")

    @field_validator("job_description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Job description cannot be empty")
        return value

    @field_validator("key_points")
    @classmethod
    def _short_points(cls, value: list[str]) -> list[str]:
        for point in value:
            if len(point) > 500:
                raise ValueError("Key points must be at most 500 characters each")
        return value


# Store field name -> RawProfile attribute
PROFILE_FIELDS = {
    "fullName": "full_name",
    "title": "title",
    "skills": "skills",
    "experience": "experience",
    "certifications": "certifications",
    "portfolio": "portfolio",
    "linkedIn": "linkedin",
    "github": "github",
    "preferredModel": "preferred_model",
}


class RawProfile(BaseModel):
    """Profile record as it comes out of the store. Nothing is validated."""

    full_name: str | None = None
    title: str | None = None
    skills: str | None = None
    experience: str | None = None
    certifications: str | None = None
    portfolio: str | None = None
    linkedin: str | None = None
    github: str | None = None
    preferred_model: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any] | None) -> RawProfile:
        if not isinstance(record, Mapping):
            return cls()
        values = {}
        for key, attr in PROFILE_FIELDS.items():
            value = record.get(key)
            if isinstance(value, str):
                values[attr] = value
        return cls(**values)


class PersonalizationFacts(BaseModel):
    full_name: str | None = None
    title: str | None = None
    skills: str | None = None
    experience: str | None = None
    certifications: str | None = None
    portfolio: str | None = None
    linkedin: str | None = None
    github: str | None = None


class Prompt(BaseModel):
    system: str
    user: str


class GenerationResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    proposal: str
    diagram: str | None = None
    model_used: str = Field(..., alias="modelUsed")
    profile_used: bool = Field(..., alias="profileUsed")


class ErrorResponse(BaseModel):
    error: str
    details: Any = None


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: str = Field(..., alias="fullName", min_length=1)
    title: str = Field(..., min_length=1)
    skills: str = Field(..., min_length=1)
    experience: str = Field(..., min_length=1)
    certifications: str = ""
    portfolio: str = ""
    linkedin: str = Field(default="", alias="linkedIn")
    github: str = ""
    preferred_model: ModelPreference = Field(default=ModelPreference.OPENAI, alias="preferredModel")

    @field_validator("portfolio", "linkedin", "github")
    @classmethod
    def _url_or_empty(cls, value: str) -> str:
        if value and not is_absolute_url(value):
            raise ValueError("Invalid URL")
        return value

    def to_record(self) -> dict[str, str]:
        return self.model_dump(mode="json", by_alias=True)


class LoginRequest(BaseModel):
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=6)


class UserInfo(BaseModel):
    id: str
    email: str
    role: str = "user"


class LoginResponse(BaseModel):
    token: str
    user: UserInfo
