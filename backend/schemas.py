from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

CATEGORIES = ["Happy", "Sad", "Tired", "Excited", "Stressed", "Calm", "Grateful"]

MOOD_EMOJIS = {
    "Happy": "😀",
    "Sad": "😢",
    "Tired": "😴",
    "Excited": "🤩",
    "Stressed": "😫",
    "Calm": "😌",
    "Grateful": "🙏",
}
FALLBACK_EMOJI = "❓"


class MoodEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    category: str
    description: str = ""
    time: datetime = Field(..., description="absolute instant, UTC")
    created_at: Optional[datetime] = None

    @field_validator("description", mode="before")
    @classmethod
    def none_is_empty(cls, v):
        return v or ""


class CreateMoodEntry(BaseModel):
    category: str = Field(..., description="one of CATEGORIES")
    description: Optional[str] = Field("", description="one line about today")
    time: str = Field(..., description="local wall-clock time, YYYY-MM-DDTHH:MM")


class MonthlySummary(BaseModel):
    year: int
    month: int
    counts: Dict[str, int]
