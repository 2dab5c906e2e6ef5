"""Storefront cart operations."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.errors import NotFoundError, ValidationFailedError
from storefront.core.logging import get_logger
from storefront.db.repositories.cart_repo import CartRepository
from storefront.db.repositories.product_repo import ProductRepository
from storefront.models.cart import Cart, CartItem
from storefront.models.product import ProductStatus
from storefront.models.store import Store

logger = get_logger(__name__)

MAX_QUANTITY = 99


def cart_total(cart: Cart) -> Decimal:
    return sum((item.unit_price * item.quantity for item in cart.items), Decimal("0"))


class CartService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.carts = CartRepository(session)
        self.products = ProductRepository(session)

    async def get_cart(self, store: Store, session_id: str) -> Optional[Cart]:
        if not session_id:
            raise ValidationFailedError("Session id is required")
        return await self.carts.get_active(store.id, session_id)

    @staticmethod
    def _touch(cart: Cart) -> None:
        # Line changes do not UPDATE the carts row, so staleness is tracked here
        cart.updated_at = datetime.now(timezone.utc)

    async def get_or_create_cart(self, store: Store, session_id: str) -> Cart:
        cart = await self.get_cart(store, session_id)
        if cart is not None:
            return cart
        cart = Cart(store_id=store.id, session_id=session_id, items=[])
        self.session.add(cart)
        await self.session.flush()
        return cart

    async def add_item(
        self,
        store: Store,
        session_id: str,
        product_id: str,
        quantity: int = 1,
        variant: Optional[str] = None,
    ) -> Cart:
        """Add a product, merging with an existing line for the same product and variant."""
        if quantity < 1 or quantity > MAX_QUANTITY:
            raise ValidationFailedError(f"Quantity must be between 1 and {MAX_QUANTITY}")

        product = await self.products.get(product_id, tenant_id=store.id)
        if product is None or product.status != ProductStatus.ACTIVE:
            raise NotFoundError("Product", product_id)
        if product.price is None:
            raise ValidationFailedError("Product is not available for purchase")
        if variant and product.sizes and variant not in product.sizes:
            raise ValidationFailedError(f"Variant '{variant}' is not available")

        cart = await self.get_or_create_cart(store, session_id)
        existing = next(
            (i for i in cart.items if i.product_id == product_id and i.variant == variant), None
        )
        if existing is not None:
            existing.quantity = min(existing.quantity + quantity, MAX_QUANTITY)
        else:
            cart.items.append(
                CartItem(
                    product_id=product.id,
                    variant=variant,
                    quantity=quantity,
                    unit_price=product.price,
                    product_snapshot={
                        "name": product.name,
                        "name_ar": product.name_ar,
                        "image_url": product.image_url,
                        "price": str(product.price),
                        "slug": product.slug,
                    },
                )
            )
        self._touch(cart)
        await self.session.flush()
        return cart

    async def _get_item(self, store: Store, session_id: str, item_id: str) -> tuple[Cart, CartItem]:
        cart = await self.get_cart(store, session_id)
        item = next((i for i in cart.items if i.id == item_id), None) if cart else None
        if cart is None or item is None:
            raise NotFoundError("Cart item", item_id)
        return cart, item

    async def update_item(self, store: Store, session_id: str, item_id: str, quantity: int) -> Cart:
        """Set a line's quantity; zero removes the line."""
        if quantity < 0 or quantity > MAX_QUANTITY:
            raise ValidationFailedError(f"Quantity must be between 0 and {MAX_QUANTITY}")
        cart, item = await self._get_item(store, session_id, item_id)
        if quantity == 0:
            cart.items.remove(item)
        else:
            item.quantity = quantity
        self._touch(cart)
        await self.session.flush()
        return cart

    async def remove_item(self, store: Store, session_id: str, item_id: str) -> Cart:
        return await self.update_item(store, session_id, item_id, 0)

    async def clear(self, store: Store, session_id: str) -> Optional[Cart]:
        cart = await self.get_cart(store, session_id)
        if cart is not None:
            cart.items.clear()
            self._touch(cart)
            await self.session.flush()
        return cart
