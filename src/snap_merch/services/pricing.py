"""Server-side canonical pricing for order items."""

from snap_merch.domain.products import get_product
from snap_merch.domain.sessions import OrderItem
from snap_merch.domain.styles import get_style


class UnknownProductError(ValueError):
    """Raised for products, sizes or colors outside the catalog."""


def build_order_item(
    product_id: str,
    style_id: str,
    size: str | None = None,
    color: str | None = None,
) -> OrderItem:
    """Validate an item against the catalog and price it.

    Client-provided prices are never trusted.
    """
    product = get_product(product_id)
    if product is None:
        raise UnknownProductError(f"Unknown product: {product_id}")
    if get_style(style_id) is None:
        raise UnknownProductError(f"Unknown style: {style_id}")
    if size is not None and size not in product.sizes:
        raise UnknownProductError(f"Size {size!r} is not offered for {product.name}")
    if color is not None and color not in {c.name for c in product.colors}:
        raise UnknownProductError(f"Color {color!r} is not offered for {product.name}")
    return OrderItem(
        product_id=product.id,
        style_id=style_id,
        price=product.base_price,
        size=size,
        color=color,
    )
