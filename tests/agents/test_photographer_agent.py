"""Tests for the photographer agent."""

import json

import pytest
from sqlalchemy import select

from storefront.agents.orchestrator import Orchestrator
from storefront.agents.photographer_agent import PhotographerAgent
from storefront.models.ai import AIUsage, UsageOperation
from storefront.models.bulk import AssetType, GeneratedAsset
from storefront.services import asset_storage

PHOTOS = ["https://cdn.test/tee-front.jpg", "https://cdn.test/tee-back.jpg"]


@pytest.fixture
def saved():
    return []


@pytest.fixture
def photographer(db_session, store, fake_llm, saved):
    def save(store_id, data, mime_type, prefix):
        url = f"https://assets.test/{store_id}/{prefix}_{len(saved) + 1}.png"
        saved.append(url)
        return url

    return PhotographerAgent(db_session, store.id, llm=fake_llm, asset_saver=save)


async def _image_usage(db_session):
    return (
        await db_session.execute(select(AIUsage).where(AIUsage.operation == UsageOperation.IMAGE_GENERATION))
    ).scalar_one_or_none()


@pytest.mark.asyncio
async def test_remove_background_stores_assets_and_usage(db_session, store, photographer, fake_llm, saved):
    updates = []
    photographer.set_progress_callback(updates.append)

    result = await photographer.execute("remove_background", {"image_urls": PHOTOS})

    assert result.success is True
    assert result.message == "Removed background from 2 images"
    assert [i["image_url"] for i in result.data["images"]] == saved
    assert [source for _, source in fake_llm.image_calls] == PHOTOS
    assert [u.message for u in updates] == ["Processed image 1/2", "Processed image 2/2"]

    assets = (await db_session.execute(select(GeneratedAsset))).scalars().all()
    assert {a.asset_type for a in assets} == {AssetType.BACKGROUND_REMOVED}
    assert (await _image_usage(db_session)).count == 2


@pytest.mark.asyncio
async def test_generate_image_applies_style(photographer, fake_llm):
    result = await photographer.execute(
        "generate_image", {"prompt": "Black tee on a rail", "style": "studio", "image_urls": PHOTOS[:1]}
    )

    assert result.success is True
    prompt, source = fake_llm.image_calls[0]
    assert prompt.startswith("Black tee on a rail. Professional studio shot")
    assert source == PHOTOS[0]
    assert result.data["images"][0]["asset_type"] == "product_image"


@pytest.mark.asyncio
async def test_batch_process_runs_each_operation_per_image(photographer, fake_llm):
    result = await photographer.execute(
        "batch_process",
        {"image_urls": PHOTOS, "operations": ["remove_background", "generate_model_shot"]},
    )

    assert result.success is True
    assert [i["asset_type"] for i in result.data["images"]] == [
        "background_removed",
        "model_shot",
        "background_removed",
        "model_shot",
    ]
    assert fake_llm.image_calls[1][0].startswith("neutral fashion model")


@pytest.mark.asyncio
async def test_daily_image_limit_blocks_generation(db_session, store, photographer, fake_llm):
    store.settings = {"ai_preferences": {"daily_limits": {"image_generation": 1}}}
    await db_session.commit()

    result = await photographer.execute("generate_lifestyle", {"image_urls": PHOTOS})

    assert result.success is False
    assert result.message == "Daily image generation limit reached"
    assert "Daily image limit reached" in result.error
    assert fake_llm.image_calls == []


@pytest.mark.asyncio
async def test_failed_generation_is_not_charged(db_session, photographer, fake_llm):
    fake_llm.image_error = ValueError("content policy")

    result = await photographer.execute("remove_background", {"image_urls": PHOTOS[:1]})

    assert result.success is False
    assert result.message == "Failed to generate any images"
    assert result.data["errors"] == [
        {"image_url": PHOTOS[0], "operation": "background_removed", "error": "content policy"}
    ]
    assert await _image_usage(db_session) is None


@pytest.mark.asyncio
async def test_product_of_another_store_is_rejected(photographer, fake_llm):
    result = await photographer.execute(
        "remove_background", {"image_urls": PHOTOS[:1], "product_id": "00000000-0000-0000-0000-00000000beef"}
    )

    assert result.success is False
    assert "not found" in result.error
    assert fake_llm.image_calls == []


@pytest.mark.asyncio
async def test_assistant_routes_photo_edits_to_photographer(db_session, store, make_llm, monkeypatch, tmp_path):
    monkeypatch.setattr(asset_storage, "ASSET_STORAGE_PATH", tmp_path)
    plan = {
        "response": "Cleaning up your photos.",
        "plan": {
            "steps": [
                {"id": "step_1", "agent": "photographer", "action": "remove_background", "params": {"image_urls": []}}
            ]
        },
    }
    llm = make_llm([json.dumps(plan), "Done."])

    result = await Orchestrator(db_session, store, llm).execute_request(
        "remove the background", image_urls=PHOTOS[:1]
    )

    assert result.tasks[0].success is True
    assert llm.image_calls[0][1] == PHOTOS[0]
    generated = result.tasks[0].result["images"][0]["image_url"]
    assert generated.startswith(f"/api/v1/media/generated/{store.id}/bg_")
    assert (await _image_usage(db_session)).count == 1
