"""Habit document schemas and result DTOs."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ----- persisted documents -----


class HabitDefinitionDocument(BaseModel):
    name: Optional[str] = None
    created: Optional[str] = None
    enabled: bool = True


class HabitConfigDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Stored for compatibility; the registry derives it from enabled habits.
    mode: Optional[str] = None
    current_habit: str = Field(default="", alias="currentHabit")
    habits: Dict[str, HabitDefinitionDocument]
    version: str = "2.0"

    @field_validator("current_habit", mode="before")
    @classmethod
    def _coerce_current(cls, v):
        return v or ""


class InitDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start: str = Field(min_length=1)
    setup_date: Optional[str] = Field(default=None, alias="setupDate")
    version: str = "2.0"


# ----- results handed to the presentation layer -----


class StreakSummary(BaseModel):
    current: int
    longest: int


class HabitStats(BaseModel):
    habit: str
    current_streak: int
    longest_streak: int
    rate_7: int
    rate_30: int
    total_completions: int


class MonthlySummary(BaseModel):
    year: int
    month: int = Field(ge=1, le=12)
    completed: int
    total: int
    percentage: int = Field(ge=0, le=100)
    label: str


class CellState(BaseModel):
    offset: int = Field(ge=0)
    date_key: str
    completed: bool


class HabitStatusLine(BaseModel):
    habit: str
    completed_today: bool = False
    current_streak: int
    rate_7: Optional[int] = None


class ExportBundle(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    history: Dict[str, Any]
    config: Dict[str, Any]
    export_date: str = Field(alias="exportDate")
    version: str = "2.0"
