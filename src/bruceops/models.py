"""Pydantic models for the BruceOps client.

The server speaks camelCase JSON. Every model accepts both the camelCase
wire names and the snake_case field names, and dumps camelCase with
``model_dump(by_alias=True)``.
"""

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    """Base for server records; unknown fields are kept."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class User(BaseModel):
    """A resolved identity.

    Identities are immutable values. Derive a changed identity with
    ``model_copy(update=...)``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True)

    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_public: bool = False
    display_name: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _fill_display_name(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if data.get("displayName") or data.get("display_name"):
            return data
        first = data.get("firstName", data.get("first_name")) or ""
        last = data.get("lastName", data.get("last_name")) or ""
        full = f"{first} {last}".strip()
        data = dict(data)
        data["displayName"] = full or data.get("email") or data.get("id")
        return data


PUBLIC_USER = User(
    id="public",
    email="public@harriswildlands.com",
    first_name="Public",
    last_name="User",
    is_public=True,
    display_name="Public User",
)

DEMO_USER = User(
    id="demo-user",
    email="demo@harriswildlands.com",
    first_name="Demo",
    last_name="Visitor",
    is_public=False,
)


class DashboardStats(_WireModel):
    """Counters shown on the dashboard."""

    logs_today: int = 0
    open_loops: int = 0
    drift_flags: Union[int, list[str]] = 0
    ai_calls: Optional[int] = None


class LogEntry(_WireModel):
    """A LifeOps daily log."""

    id: Optional[int] = None
    user_id: Optional[str] = None
    date: str
    sleep_hours: Optional[int] = None
    sleep_quality: Optional[int] = None
    energy: Optional[int] = None
    stress: Optional[int] = None
    mood: Optional[int] = None
    focus: Optional[int] = None
    money_pressure: Optional[int] = None
    vaping: Optional[bool] = None
    exercise: Optional[bool] = None
    day_type: Optional[str] = None
    primary_emotion: Optional[str] = None
    top_win: Optional[str] = None
    top_friction: Optional[str] = None
    tomorrow_priority: Optional[str] = None
    family_connection: Optional[str] = None
    faith_alignment: Optional[str] = None
    drift_check: Optional[str] = None
    ai_summary: Optional[str] = None
    created_at: Optional[datetime] = None


class Idea(_WireModel):
    """A ThinkOps idea."""

    id: Optional[int] = None
    user_id: Optional[str] = None
    title: Optional[str] = None
    pitch: Optional[str] = None
    category: Optional[str] = None
    capture_mode: Optional[str] = None
    status: Optional[str] = "draft"
    excitement: Optional[int] = None
    feasibility: Optional[int] = None
    tiny_test: Optional[str] = None
    reality_check: Optional[dict[str, Any]] = None
    promoted_spec: Optional[dict[str, Any]] = None
    milestones: list[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class TeachingRequest(_WireModel):
    """A request to the teaching assistant and its generated output."""

    id: Optional[int] = None
    grade: Optional[str] = None
    standard: Optional[str] = None
    topic: Optional[str] = None
    time_block: Optional[str] = None
    materials: Optional[str] = None
    student_profile: Optional[str] = None
    constraints: Optional[str] = None
    assessment_type: Optional[str] = None
    format: Optional[str] = None
    output: Optional[dict[str, Any]] = None
    created_at: Optional[datetime] = None


class HarrisContent(_WireModel):
    """Generated content for the Harris Wildlands site."""

    id: Optional[int] = None
    user_id: Optional[str] = None
    content_type: Optional[str] = None
    tone: Optional[str] = None
    template: Optional[str] = None
    topic: Optional[str] = None
    generated_content: Optional[str] = None
    created_at: Optional[datetime] = None


class Setting(_WireModel):
    key: str
    value: Optional[str] = None


class HealthStatus(_WireModel):
    """Server health probe."""

    status: str
    version: Optional[str] = None
    environment: Optional[str] = None
    database: Optional[str] = None
    ai_provider: Optional[str] = None
    ai_status: Optional[str] = None
