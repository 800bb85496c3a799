from __future__ import annotations

from typing import Optional, List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field

from zenplan.models import MoodLog, Task, WeeklyGoal


class UserDocumentPatch(BaseModel):
    """Top-level fields of a user document; only the fields sent are merged."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    email: Optional[str] = None
    display_name: Optional[str] = Field(None, alias="displayName")
    photo_url: Optional[str] = Field(None, alias="photoURL")
    tasks: Optional[List[Task]] = None
    weekly_goals: Optional[List[WeeklyGoal]] = Field(None, alias="weeklyGoals")
    mood_logs: Optional[List[MoodLog]] = Field(None, alias="moodLogs")
    streak: Optional[int] = None
    last_streak_date: Optional[str] = Field(None, alias="lastStreakDate")

    def to_patch(self) -> Dict[str, Any]:
        data = self.model_dump(by_alias=True, mode="json", exclude_none=True)
        fields = type(self).model_fields
        sent = {fields[name].alias or name for name in self.model_fields_set}
        return {key: value for key, value in data.items() if key in sent}


class ProfileCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = ""
    display_name: str = Field("User", alias="displayName")
    photo_url: str = Field("", alias="photoURL")


class RolePayload(BaseModel):
    role: str


class UsersResponse(BaseModel):
    items: List[Dict[str, Any]]
