"""Public storefront: catalog browsing, cart and checkout.

The store is resolved from the request host (or ``X-Tenant-Override``);
carts are keyed by the shopper's ``X-Session-Id``.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_session_id, get_storefront_store
from storefront.core.errors import NotFoundError, ValidationFailedError
from storefront.db.repositories.product_repo import ProductRepository
from storefront.db.session import get_db
from storefront.models.cart import Cart
from storefront.models.product import Product, ProductStatus
from storefront.models.store import Store
from storefront.schemas.order import (
    CartItemAdd,
    CartItemResponse,
    CartItemUpdate,
    CartResponse,
    CheckoutRequest,
    OrderResponse,
)
from storefront.schemas.product import CategoryResponse, PublicProductResponse
from storefront.schemas.store import PreviewValidationResponse
from storefront.services.cart_service import CartService, cart_total
from storefront.services.catalog_service import CatalogService
from storefront.services.order_service import OrderService
from storefront.services.store_lifecycle import StoreLifecycleService

router = APIRouter()


def _public_product(product: Product) -> PublicProductResponse:
    return PublicProductResponse(
        id=product.id,
        name=product.name,
        name_ar=product.name_ar,
        slug=product.slug,
        description=product.description,
        description_ar=product.description_ar,
        category=product.category,
        price=product.price,
        currency=product.currency,
        image_url=product.image_url,
        images=product.images or [],
        sizes=product.sizes or [],
        in_stock=(product.inventory or 0) > 0,
    )


def _cart_response(store: Store, cart: Optional[Cart]) -> CartResponse:
    if cart is None:
        return CartResponse(currency=store.currency)
    return CartResponse(
        id=cart.id,
        items=[CartItemResponse.model_validate(i) for i in cart.items],
        item_count=sum(i.quantity for i in cart.items),
        total=cart_total(cart),
        currency=store.currency,
    )


def _require_session(session_id: Optional[str]) -> str:
    if not session_id:
        raise ValidationFailedError("X-Session-Id header is required")
    return session_id


@router.get("/products", response_model=List[PublicProductResponse])
async def list_products(
    q: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(24, ge=1, le=100),
    store: Store = Depends(get_storefront_store),
    db: AsyncSession = Depends(get_db),
) -> List[PublicProductResponse]:
    """Published products only."""
    items, _ = await CatalogService(db).search_products(
        store.id,
        query_text=q,
        category=category,
        status=ProductStatus.ACTIVE,
        skip=skip,
        limit=limit,
    )
    return [_public_product(p) for p in items]


@router.get("/products/{slug}", response_model=PublicProductResponse)
async def get_product(
    slug: str,
    store: Store = Depends(get_storefront_store),
    db: AsyncSession = Depends(get_db),
) -> PublicProductResponse:
    product = await ProductRepository(db).get_by_slug(store.id, slug)
    if product is None or product.status != ProductStatus.ACTIVE:
        raise NotFoundError("Product", slug)
    return _public_product(product)


@router.get("/categories", response_model=List[CategoryResponse])
async def list_categories(
    store: Store = Depends(get_storefront_store),
    db: AsyncSession = Depends(get_db),
):
    return await CatalogService(db).list_categories(store.id)


@router.get("/cart", response_model=CartResponse)
async def get_cart(
    store: Store = Depends(get_storefront_store),
    session_id: Optional[str] = Depends(get_session_id),
    db: AsyncSession = Depends(get_db),
) -> CartResponse:
    cart = await CartService(db).get_cart(store, _require_session(session_id))
    return _cart_response(store, cart)


@router.delete("/cart", response_model=CartResponse)
async def clear_cart(
    store: Store = Depends(get_storefront_store),
    session_id: Optional[str] = Depends(get_session_id),
    db: AsyncSession = Depends(get_db),
) -> CartResponse:
    cart = await CartService(db).clear(store, _require_session(session_id))
    await db.commit()
    return _cart_response(store, cart)


@router.post("/cart/items", response_model=CartResponse, status_code=status.HTTP_201_CREATED)
async def add_cart_item(
    item_in: CartItemAdd,
    store: Store = Depends(get_storefront_store),
    session_id: Optional[str] = Depends(get_session_id),
    db: AsyncSession = Depends(get_db),
) -> CartResponse:
    cart = await CartService(db).add_item(
        store,
        _require_session(session_id),
        item_in.product_id,
        quantity=item_in.quantity,
        variant=item_in.variant,
    )
    await db.commit()
    return _cart_response(store, cart)


@router.patch("/cart/items/{item_id}", response_model=CartResponse)
async def update_cart_item(
    item_id: str,
    item_in: CartItemUpdate,
    store: Store = Depends(get_storefront_store),
    session_id: Optional[str] = Depends(get_session_id),
    db: AsyncSession = Depends(get_db),
) -> CartResponse:
    cart = await CartService(db).update_item(
        store, _require_session(session_id), item_id, item_in.quantity
    )
    await db.commit()
    return _cart_response(store, cart)


@router.delete("/cart/items/{item_id}", response_model=CartResponse)
async def remove_cart_item(
    item_id: str,
    store: Store = Depends(get_storefront_store),
    session_id: Optional[str] = Depends(get_session_id),
    db: AsyncSession = Depends(get_db),
) -> CartResponse:
    cart = await CartService(db).remove_item(store, _require_session(session_id), item_id)
    await db.commit()
    return _cart_response(store, cart)


@router.post("/checkout", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def checkout(
    checkout_in: CheckoutRequest,
    store: Store = Depends(get_storefront_store),
    session_id: Optional[str] = Depends(get_session_id),
    db: AsyncSession = Depends(get_db),
):
    """Place an order for everything in the session's cart."""
    order = await OrderService(db).checkout(
        store, _require_session(session_id), checkout_in.model_dump()
    )
    await db.commit()
    return order


@router.get("/preview/{token}", response_model=PreviewValidationResponse)
async def validate_preview(
    token: str,
    db: AsyncSession = Depends(get_db),
) -> PreviewValidationResponse:
    valid, store_id = await StoreLifecycleService(db).validate_preview_token(token)
    await db.commit()
    return PreviewValidationResponse(valid=valid, store_id=store_id)
