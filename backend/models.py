from pydantic import BaseModel, ConfigDict, Field, computed_field
from typing import Optional

from priority import Scale, PriorityBucket, classify_priority

class Task(BaseModel):
    model_config = ConfigDict(frozen=True)

    task: str = Field(min_length=1)
    urgency: Scale
    importance: Scale
    estimated_time_minutes: int = Field(ge=5, le=240)

    @computed_field
    @property
    def priority_bucket(self) -> PriorityBucket:
        # Always derived, never accepted from the caller
        return classify_priority(self.urgency, self.importance)

class AnalyzeRequest(BaseModel):
    input: Optional[str] = None

class AnalyzeResponse(BaseModel):
    tasks: list[Task]

class Message(BaseModel):
    role: str  # "user", "assistant" or "system"
    content: str

class ReminderStatus(BaseModel):
    state: str  # "idle" or "running"
    interval_minutes: float

class SessionView(BaseModel):
    session_id: str
    last_input: str
    tasks: list[Task]  # insertion order, as analyzed
    ranked: list[Task]  # "what's next" order
    matrix: dict[str, list[Task]]
    reminder: ReminderStatus
    messages: list[Message]

class RecommendationResponse(BaseModel):
    message: str
    tasks: list[Task]
