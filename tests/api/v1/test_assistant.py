"""API tests for the merchant AI assistant."""

import json

import pytest
from httpx import AsyncClient


def _plan(response, *steps):
    return json.dumps({"response": response, "plan": {"steps": list(steps)}})


@pytest.mark.asyncio
async def test_assistant_runs_plan_and_lists_tasks(client: AsyncClient, fake_llm, make_product):
    await make_product("Black Hoodie")
    fake_llm.replies = [
        _plan(
            "Searching.",
            {"id": "step_1", "agent": "product", "action": "search_products", "params": {"query": "hoodie"}},
        ),
        "You have one hoodie in stock.",
    ]

    response = await client.post("/api/v1/assistant/", json={"message": "what hoodies do I have?"})

    assert response.status_code == 200
    result = response.json()
    assert result["success"] is True
    assert result["response"] == "You have one hoodie in stock."
    assert result["plan"]["status"] == "completed"

    tasks = (await client.get("/api/v1/assistant/tasks")).json()
    assert [(t["agent"], t["task_type"], t["success"]) for t in tasks] == [
        ("product", "search_products", True)
    ]


@pytest.mark.asyncio
async def test_assistant_asks_before_deleting(client: AsyncClient, fake_llm, make_product):
    product = await make_product("Old Tee")
    fake_llm.replies = [
        _plan(
            "Deleting.",
            {
                "id": "step_1",
                "agent": "product",
                "action": "delete_products_bulk",
                "params": {"product_ids": [product.id]},
            },
        )
    ]

    result = (await client.post("/api/v1/assistant/", json={"message": "delete the old tee"})).json()

    assert result["confirmation_required"] is not None
    assert result["tasks"] == []
    assert (await client.get(f"/api/v1/products/{product.id}")).status_code == 200


@pytest.mark.asyncio
async def test_assistant_rejects_empty_message(client: AsyncClient):
    response = await client.post("/api/v1/assistant/", json={"message": ""})

    assert response.status_code == 422
