"""Merchandise product catalog."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProductColor:
    name: str
    hex: str


@dataclass(frozen=True)
class ProductOption:
    """A product artwork can be printed on."""

    id: str
    name: str
    emoji: str
    base_price: float
    sizes: tuple[str, ...] = ()
    colors: tuple[ProductColor, ...] = field(default_factory=tuple)


_APPAREL_SIZES = ("S", "M", "L", "XL", "2XL")
_APPAREL_COLORS = (
    ProductColor("Black", "#000000"),
    ProductColor("White", "#FFFFFF"),
    ProductColor("Navy", "#001F3F"),
    ProductColor("Heather Gray", "#9CA3AF"),
    ProductColor("Red", "#C8102E"),
)

PRODUCT_OPTIONS: tuple[ProductOption, ...] = (
    ProductOption(
        id="tshirt",
        name="T-Shirt",
        emoji="👕",
        base_price=29.99,
        sizes=_APPAREL_SIZES,
        colors=_APPAREL_COLORS,
    ),
    ProductOption(
        id="hoodie",
        name="Hoodie",
        emoji="🧥",
        base_price=49.99,
        sizes=_APPAREL_SIZES,
        colors=_APPAREL_COLORS,
    ),
    ProductOption(
        id="mug",
        name="Coffee Mug",
        emoji="☕",
        base_price=19.99,
        colors=(ProductColor("White", "#FFFFFF"), ProductColor("Black", "#000000")),
    ),
    ProductOption(
        id="poster",
        name="Poster",
        emoji="🖼️",
        base_price=34.99,
        sizes=("12×18", "18×24", "24×36"),
    ),
)

_BY_ID = {product.id: product for product in PRODUCT_OPTIONS}


def get_product(product_id: str) -> ProductOption | None:
    return _BY_ID.get(product_id)
