"""Catalogue of available agents, used for planning prompts and input validation."""

from dataclasses import dataclass, field
from typing import Literal, Optional, Type

from pydantic import BaseModel

ModelTier = Literal["pro", "flash", "vision"]


@dataclass
class AgentDescriptor:
    type: str
    name: str
    description: str
    model: ModelTier
    capabilities: list[str] = field(default_factory=list)
    # Input model per action; actions without an entry take free-form params
    input_schemas: dict[str, Type[BaseModel]] = field(default_factory=dict)
    output_schema: Optional[Type[BaseModel]] = None


class AgentRegistry:
    def __init__(self) -> None:
        self._agents: dict[str, AgentDescriptor] = {}

    def register(self, descriptor: AgentDescriptor) -> None:
        self._agents[descriptor.type] = descriptor

    def get(self, agent_type: str) -> Optional[AgentDescriptor]:
        return self._agents.get(agent_type)

    def has(self, agent_type: str) -> bool:
        return agent_type in self._agents

    def get_all(self) -> list[AgentDescriptor]:
        return list(self._agents.values())

    def get_by_capability(self, capability: str) -> list[AgentDescriptor]:
        return [a for a in self._agents.values() if capability in a.capabilities]

    def describe(self) -> str:
        """Plain-text summary of agents and their actions for the planner prompt."""
        lines = []
        for agent in self._agents.values():
            lines.append(f"- {agent.type}: {agent.description}")
            lines.append(f"  actions: {', '.join(agent.capabilities)}")
        return "\n".join(lines)


agent_registry = AgentRegistry()
