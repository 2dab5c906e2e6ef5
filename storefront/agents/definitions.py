"""Agent descriptors and per-action input models, registered at import."""

from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field

from storefront.agents.registry import AgentDescriptor, agent_registry


# ===== Product agent inputs =====


class SearchProductsInput(BaseModel):
    query: Optional[str] = None
    category: Optional[str] = None
    status: Optional[Literal["draft", "active", "archived"]] = None
    limit: int = Field(default=20, ge=1, le=100)


class ProductIdInput(BaseModel):
    product_id: str


class CreateProductInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    name_ar: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    image_urls: list[str] = Field(default_factory=list)
    sizes: list[str] = Field(default_factory=list)
    inventory: int = Field(default=0, ge=0)


class UpdateProductInput(BaseModel):
    product_id: str
    name: Optional[str] = None
    name_ar: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    inventory: Optional[int] = Field(default=None, ge=0)
    status: Optional[Literal["draft", "active", "archived"]] = None


class ProductIdsInput(BaseModel):
    product_ids: list[str] = Field(..., min_length=1)


class PublishProductsInput(ProductIdsInput):
    publish: bool = True


class UpdatePricesInput(ProductIdsInput):
    price: Optional[Decimal] = Field(default=None, ge=0)
    percent_change: Optional[float] = Field(default=None, gt=-100, le=1000)


# ===== Analyst agent inputs =====


class StoreSummaryInput(BaseModel):
    period: Literal["day", "week", "month", "year"] = "week"


class TopProductsInput(BaseModel):
    limit: int = Field(default=5, ge=1, le=50)


# ===== Photographer agent inputs =====


class ImageSourceInput(BaseModel):
    image_urls: list[str] = Field(..., min_length=1, max_length=20)
    product_id: Optional[str] = None


class GenerateImageInput(ImageSourceInput):
    prompt: str = Field(..., min_length=1, max_length=1000)
    style: Literal["clean", "lifestyle", "studio", "urban"] = "clean"


class LifestyleInput(ImageSourceInput):
    setting: str = Field(default="urban street scene", max_length=200)


class ModelShotInput(ImageSourceInput):
    gender: Literal["male", "female", "neutral"] = "neutral"


class BatchProcessInput(ImageSourceInput):
    operations: list[Literal["remove_background", "generate_lifestyle", "generate_model_shot"]] = Field(
        default_factory=lambda: ["remove_background"], min_length=1
    )


# ===== Bulk deals agent inputs =====


class CreateBatchInput(BaseModel):
    image_urls: list[str] = Field(..., min_length=1)
    name: Optional[str] = None
    generate_lifestyle: bool = True
    remove_background: bool = True
    create_products: bool = True


class BatchStatusInput(BaseModel):
    batch_id: str


agent_registry.register(
    AgentDescriptor(
        type="manager",
        name="Manager",
        description="Understands the merchant's request, plans steps for other agents and summarises results",
        model="pro",
        capabilities=["analyze_request", "synthesize_response"],
    )
)

agent_registry.register(
    AgentDescriptor(
        type="product",
        name="Product Manager",
        description="Searches, creates, edits, prices, publishes and deletes catalog products",
        model="flash",
        capabilities=[
            "search_products",
            "get_product",
            "create_product",
            "update_product",
            "delete_product",
            "delete_products_bulk",
            "publish_products_bulk",
            "update_prices_bulk",
        ],
        input_schemas={
            "search_products": SearchProductsInput,
            "get_product": ProductIdInput,
            "create_product": CreateProductInput,
            "update_product": UpdateProductInput,
            "delete_product": ProductIdInput,
            "delete_products_bulk": ProductIdsInput,
            "publish_products_bulk": PublishProductsInput,
            "update_prices_bulk": UpdatePricesInput,
        },
    )
)

agent_registry.register(
    AgentDescriptor(
        type="analyst",
        name="Analyst",
        description="Reports on catalog and sales figures for the store",
        model="flash",
        capabilities=["store_summary", "top_products"],
        input_schemas={
            "store_summary": StoreSummaryInput,
            "top_products": TopProductsInput,
        },
    )
)

agent_registry.register(
    AgentDescriptor(
        type="bulk_deals",
        name="Bulk Deals",
        description="Turns a set of product photos into grouped, edited product drafts",
        model="vision",
        capabilities=["create_batch", "batch_status"],
        input_schemas={
            "create_batch": CreateBatchInput,
            "batch_status": BatchStatusInput,
        },
    )
)

agent_registry.register(
    AgentDescriptor(
        type="photographer",
        name="Photographer",
        description="Edits product photos: background removal, lifestyle and model shots, styled product images",
        model="vision",
        capabilities=[
            "generate_image",
            "remove_background",
            "generate_lifestyle",
            "generate_model_shot",
            "batch_process",
        ],
        input_schemas={
            "generate_image": GenerateImageInput,
            "remove_background": ImageSourceInput,
            "generate_lifestyle": LifestyleInput,
            "generate_model_shot": ModelShotInput,
            "batch_process": BatchProcessInput,
        },
    )
)
