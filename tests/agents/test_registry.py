"""Tests for the agent registry and input validation."""

import pytest
from pydantic import BaseModel

from storefront.agents import definitions  # noqa: F401  registers agent descriptors
from storefront.agents.product_agent import ProductAgent
from storefront.agents.registry import AgentDescriptor, AgentRegistry, agent_registry


def test_builtin_agents_are_registered():
    for agent_type in ("manager", "product", "analyst", "bulk_deals", "photographer"):
        assert agent_registry.has(agent_type)


def test_describe_lists_actions():
    description = agent_registry.describe()

    assert "- product:" in description
    assert "delete_products_bulk" in description
    assert "create_batch" in description


def test_get_by_capability():
    agents = agent_registry.get_by_capability("top_products")

    assert [a.type for a in agents] == ["analyst"]


def test_isolated_registry():
    class EchoInput(BaseModel):
        text: str

    registry = AgentRegistry()
    registry.register(
        AgentDescriptor(
            type="echo",
            name="Echo",
            description="Repeats input",
            model="flash",
            capabilities=["echo"],
            input_schemas={"echo": EchoInput},
        )
    )

    assert registry.get("echo").input_schemas["echo"] is EchoInput
    assert registry.get("product") is None


def test_validate_input_applies_defaults():
    agent = ProductAgent(session=None, store_id="store-1")

    assert agent.validate_input("search_products", {"query": "hoodie"}) == {
        "query": "hoodie",
        "category": None,
        "status": None,
        "limit": 20,
    }


def test_validate_input_rejects_bad_params():
    agent = ProductAgent(session=None, store_id="store-1")

    with pytest.raises(ValueError, match="Invalid input for delete_products_bulk"):
        agent.validate_input("delete_products_bulk", {"product_ids": []})
