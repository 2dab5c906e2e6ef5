"""Tests for product photo grouping."""

import json

import pytest

from storefront.core.config import settings
from storefront.services.bulk.image_grouper import (
    ImageGrouper,
    ProductGroup,
    create_fallback_groups,
    is_similar_product,
    validate_groups,
)

IMAGES = [f"https://cdn.test/{i}.jpg" for i in range(1, 5)]


def test_fallback_gives_one_group_per_image():
    groups = create_fallback_groups(IMAGES[:2])

    assert [g.images for g in groups] == [[IMAGES[0]], [IMAGES[1]]]
    assert groups[0].id == "group_1"
    assert groups[1].name == "Product 2"


def test_validate_groups_repairs_model_output():
    raw = [
        {"id": "group_1", "name": "Hoodie", "category": "hoodies", "mainImage": "https://elsewhere/x.jpg",
         "images": [IMAGES[0], IMAGES[1], "https://elsewhere/x.jpg"]},
        {"id": "group_2", "name": "Dup", "category": "hoodies", "mainImage": IMAGES[1], "images": [IMAGES[1]]},
        "not a group",
    ]

    groups = validate_groups(raw, IMAGES)

    assert groups[0].images == [IMAGES[0], IMAGES[1]]
    assert groups[0].main_image == IMAGES[0]
    # group_2 only repeated an assigned image, so it is dropped
    assert [g.id for g in groups] == ["group_1", "group_auto_1", "group_auto_2"]
    assert groups[1].images == [IMAGES[2]]
    assert groups[2].name == "Product (Auto)"


def test_every_image_lands_in_exactly_one_group():
    raw = [{"id": "g", "name": "Tee", "category": "t-shirts", "images": [IMAGES[3], IMAGES[3]]}]

    groups = validate_groups(raw, IMAGES)
    assigned = [img for g in groups for img in g.images]

    assert sorted(assigned) == sorted(IMAGES)


def test_similarity_requires_category_and_shared_words():
    a = ProductGroup(id="a", name="Black Cargo Pants", category="pants", main_image="", images=[])
    b = ProductGroup(id="b", name="Black Cargo Pants Side", category="pants", main_image="", images=[])
    c = ProductGroup(id="c", name="Black Cargo Pants", category="jackets", main_image="", images=[])
    d = ProductGroup(id="d", name="White Linen Shirt", category="pants", main_image="", images=[])

    assert is_similar_product(a, b) is True
    assert is_similar_product(a, c) is False
    assert is_similar_product(a, d) is False


@pytest.mark.asyncio
async def test_group_uses_model_reply(make_llm):
    reply = json.dumps(
        [{"id": "group_1", "name": "Logo Tee", "category": "t-shirts", "mainImage": IMAGES[1], "images": IMAGES[:2]}]
    )
    grouper = ImageGrouper(make_llm([reply]))

    groups = await grouper.group(IMAGES[:2])

    assert len(groups) == 1
    assert groups[0].main_image == IMAGES[1]
    assert grouper.tokens_used == 10


@pytest.mark.asyncio
async def test_group_falls_back_on_model_error(make_llm):
    grouper = ImageGrouper(make_llm([RuntimeError("503")]))

    groups = await grouper.group(IMAGES[:3])

    assert [g.images for g in groups] == [[u] for u in IMAGES[:3]]


@pytest.mark.asyncio
async def test_group_falls_back_on_non_json_reply(make_llm):
    grouper = ImageGrouper(make_llm(["I could not see anything"]))

    groups = await grouper.group(IMAGES[:2])

    assert len(groups) == 2


@pytest.mark.asyncio
async def test_large_sets_are_chunked_and_merged(make_llm, monkeypatch):
    monkeypatch.setattr(settings, "bulk_grouping_chunk_size", 2)
    first = json.dumps(
        [{"id": "group_1", "name": "Black Cargo Pants", "category": "pants", "images": IMAGES[:2]}]
    )
    second = json.dumps(
        [
            {"id": "group_1", "name": "Black Cargo Pants", "category": "pants", "images": [IMAGES[2]]},
            {"id": "group_2", "name": "Red Bucket Hat", "category": "accessories", "images": [IMAGES[3]]},
        ]
    )
    llm = make_llm([first, second])

    groups = await ImageGrouper(llm).group(IMAGES)

    assert len(llm.prompts) == 2
    assert [g.id for g in groups] == ["group_1", "group_2"]
    assert groups[0].images == IMAGES[:3]
    assert groups[1].images == [IMAGES[3]]


@pytest.mark.asyncio
async def test_colliding_ids_from_later_chunks_are_suffixed(make_llm, monkeypatch):
    monkeypatch.setattr(settings, "bulk_grouping_chunk_size", 2)
    first = json.dumps([{"id": "group_1", "name": "Blue Denim Jacket", "category": "jackets", "images": IMAGES[:2]}])
    second = json.dumps([{"id": "group_1", "name": "Canvas Tote", "category": "accessories", "images": IMAGES[2:]}])

    groups = await ImageGrouper(make_llm([first, second])).group(IMAGES)

    assert [g.id for g in groups] == ["group_1", "group_1_2"]
