"""Data types shared by the planner, executor and agents."""

import enum
from typing import Any, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, Field


class StepStatus(str, enum.Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ExecutionStep(BaseModel):
    """One agent action inside a plan.

    ``params`` values may reference earlier results with
    ``"$step:<step_id>.<path>"``.
    """

    id: str
    agent: str
    action: str
    params: dict[str, Any] = Field(default_factory=dict)
    depends_on: list[str] = Field(default_factory=list)
    status: StepStatus = StepStatus.PENDING
    result: Optional[Any] = None
    error: Optional[str] = None


class ExecutionPlan(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    request: str
    steps: list[ExecutionStep] = Field(default_factory=list)
    status: Literal["planning", "executing", "completed", "failed"] = "planning"


class StepResult(BaseModel):
    step_id: str
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    tokens_used: int = 0


class StepUpdate(BaseModel):
    """Progress event streamed to the caller while a plan runs."""

    type: Literal["planning", "executing", "synthesizing", "complete"]
    step: Optional[int] = None
    total_steps: Optional[int] = None
    agent_name: Optional[str] = None
    action: Optional[str] = None
    message: str
    data: Optional[dict[str, Any]] = None


class ConfirmationRequest(BaseModel):
    action: str
    description: str
    impact: str
    requires_confirmation: bool = True
    affected_items: Optional[int] = None


class AgentResult(BaseModel):
    success: bool
    message: Optional[str] = None
    data: Optional[Any] = None
    error: Optional[str] = None
    tokens_used: int = 0
    confirmation_required: Optional[ConfirmationRequest] = None


class AgentTaskSummary(BaseModel):
    agent: str
    action: str
    success: bool
    result: Optional[Any] = None
    error: Optional[str] = None


class OrchestratorResult(BaseModel):
    success: bool
    response: str
    tasks: list[AgentTaskSummary] = Field(default_factory=list)
    total_tokens: int = 0
    execution_time_ms: int = 0
    steps: list[StepUpdate] = Field(default_factory=list)
    confirmation_required: Optional[ConfirmationRequest] = None
    plan: Optional[ExecutionPlan] = None
