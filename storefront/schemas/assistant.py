"""AI assistant and usage schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ConversationMessage(BaseModel):
    role: str = Field(..., pattern=r"^(user|assistant)$")
    content: str


class AssistantRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=4000)
    context: Optional[Dict[str, Any]] = None
    history: List[ConversationMessage] = []
    image_urls: List[str] = []
    confirmed: bool = False


class AITaskResponse(BaseModel):
    id: str
    agent: str
    task_type: str
    success: bool
    error: Optional[str] = None
    tokens_used: int
    duration_ms: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class UsageSummaryResponse(BaseModel):
    date: str
    limits: Dict[str, int]
    usage: Dict[str, int]
    percentages: Dict[str, float]
    warnings: List[str] = []
