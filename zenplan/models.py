from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

TaskStatus = Literal["pending", "completed", "not-completed"]
Mood = Literal["happy", "neutral", "tired"]
MoodContext = Literal["completion", "failure"]
UserRole = Literal["user", "admin", "super_admin"]
Theme = Literal["light", "dark"]


def new_id() -> str:
    return uuid4().hex


def now_ms(moment: datetime | None = None) -> int:
    moment = moment or datetime.now()
    return int(moment.timestamp() * 1000)


class EntityModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class Task(EntityModel):
    id: Optional[str] = None
    title: str
    description: Optional[str] = ""
    status: TaskStatus = "pending"
    progress: int = Field(0, ge=0, le=100)
    created_at: int = Field(0, alias="createdAt")
    last_updated: Optional[int] = Field(None, alias="lastUpdated")


class WeeklyGoal(EntityModel):
    id: Optional[str] = None
    title: str
    is_done: bool = Field(False, alias="isDone")
    created_at: int = Field(0, alias="createdAt")
    last_updated: Optional[int] = Field(None, alias="lastUpdated")


class MoodLog(EntityModel):
    id: str
    mood: Mood
    timestamp: int
    context: MoodContext = "completion"


class UserData(EntityModel):
    """Per-user remote document: profile fields plus the embedded collections."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    uid: str
    email: str = ""
    display_name: str = Field("User", alias="displayName")
    photo_url: str = Field("", alias="photoURL")
    role: UserRole = "user"
    created_at: int = Field(0, alias="createdAt")
    tasks: Optional[List[Task]] = None
    weekly_goals: Optional[List[WeeklyGoal]] = Field(None, alias="weeklyGoals")
    mood_logs: Optional[List[MoodLog]] = Field(None, alias="moodLogs")
    streak: Optional[int] = None
    last_streak_date: Optional[str] = Field(None, alias="lastStreakDate")


@dataclass(frozen=True)
class Identity:
    uid: str
    display_name: str = "User"
    email: str = ""
    photo_url: str = ""


def dump_collection(items: Iterable[EntityModel]) -> list[dict]:
    return [item.to_payload() for item in items]


def fallback_profile(identity: Identity, created_at: int) -> UserData:
    return UserData(
        uid=identity.uid,
        email=identity.email,
        display_name=identity.display_name or "User",
        photo_url=identity.photo_url or "",
        role="user",
        created_at=created_at,
    )
