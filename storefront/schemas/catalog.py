# storefront/schemas/catalog.py
from pydantic import ConfigDict
from sqlmodel import SQLModel, Field

from storefront.core.notifications import Notification


class Category(SQLModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    slug: str
    description: str | None = None
    image_url: str | None = None


class PromoBanner(SQLModel):
    """
    Promo banner row. Unknown columns are passed through as-is.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    title: str | None = None
    image_url: str | None = None
    link_url: str | None = None
    sort_order: int | None = None


class CategoryRef(SQLModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    slug: str


class FeaturedProduct(SQLModel):
    """
    Product card data for the storefront, decorated with a rating.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    price: float
    original_price: float | None = None
    description: str = ""
    images: list[str] = Field(default_factory=list)
    stock_quantity: int | None = None
    slug: str
    view_count: int = 0
    is_preorder: bool = False
    condition: str | None = None
    category: CategoryRef | None = None
    rating: float = 4.0
    reviews_count: int = 50


class CategoryList(SQLModel):
    items: list[Category]
    notifications: list[Notification] = Field(default_factory=list)


class PromoBannerList(SQLModel):
    items: list[PromoBanner]
    notifications: list[Notification] = Field(default_factory=list)


class FeaturedProductPage(SQLModel):
    items: list[FeaturedProduct]
    has_more: bool
    notifications: list[Notification] = Field(default_factory=list)
