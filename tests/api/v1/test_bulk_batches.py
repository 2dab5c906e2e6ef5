"""API tests for bulk batches, drafts and generated media."""

import json

import pytest
from httpx import AsyncClient

from storefront.services import asset_storage

IMAGES = ["https://cdn.test/tee-front.jpg", "https://cdn.test/tee-back.jpg"]


@pytest.fixture(autouse=True)
def asset_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(asset_storage, "ASSET_STORAGE_PATH", tmp_path)
    return tmp_path


@pytest.mark.asyncio
async def test_create_batch_queues_it(client: AsyncClient, enqueued):
    response = await client.post("/api/v1/bulk-batches/", json={"source_urls": IMAGES, "name": "Summer drop"})

    assert response.status_code == 201
    batch = response.json()
    assert batch["status"] == "pending"
    assert batch["total_images"] == 2
    assert enqueued == [batch["id"]]

    listed = (await client.get("/api/v1/bulk-batches/")).json()
    assert [b["id"] for b in listed] == [batch["id"]]


@pytest.mark.asyncio
async def test_create_batch_rejects_empty_upload(client: AsyncClient, enqueued):
    response = await client.post("/api/v1/bulk-batches/", json={"source_urls": []})

    assert response.status_code == 400
    assert enqueued == []


@pytest.mark.asyncio
async def test_inline_processing_to_published_products(client: AsyncClient, fake_llm):
    fake_llm.replies = [
        json.dumps([{"id": "group_1", "name": "Logo Tee", "category": "t-shirts", "mainImage": IMAGES[0], "images": IMAGES}]),
        json.dumps({"name": "Heavy Logo Tee", "description": "Boxy fit.", "suggestedSizes": ["M", "L"], "gender": "unisex"}),
    ]
    batch = (
        await client.post(
            "/api/v1/bulk-batches/",
            json={"source_urls": IMAGES, "config": {"generate_lifestyle": False}},
        )
    ).json()

    response = await client.post(f"/api/v1/bulk-batches/{batch['id']}/process")

    assert response.status_code == 200
    processed = response.json()
    assert processed["status"] == "completed"
    assert processed["processed_count"] == 2

    assets = (await client.get(f"/api/v1/bulk-batches/{batch['id']}/assets")).json()
    assert len(assets) == 2
    assert {a["asset_type"] for a in assets} == {"background_removed"}
    media = await client.get(assets[0]["generated_url"])
    assert media.status_code == 200
    assert media.content == b"\x89PNG"

    drafts = (await client.get("/api/v1/drafts/", params={"batch_id": batch["id"]})).json()
    assert [d["name"] for d in drafts] == ["Heavy Logo Tee"]
    draft = drafts[0]

    response = await client.patch(f"/api/v1/drafts/{draft['id']}", json={"suggested_price": "89.00"})
    assert response.status_code == 200

    response = await client.post("/api/v1/drafts/persist", json={"draft_ids": [draft["id"]], "publish": True})
    result = response.json()
    assert len(result["created_product_ids"]) == 1

    product = (await client.get(f"/api/v1/products/{result['created_product_ids'][0]}")).json()
    assert product["status"] == "active"
    assert product["batch_id"] == batch["id"]
    assert product["sizes"] == ["M", "L"]

    again = await client.post(f"/api/v1/bulk-batches/{batch['id']}/process")
    assert again.status_code == 409


@pytest.mark.asyncio
async def test_media_rejects_path_tricks(client: AsyncClient, store):
    response = await client.get(f"/api/v1/media/generated/{store.id}/..secret.png")

    assert response.status_code == 404
