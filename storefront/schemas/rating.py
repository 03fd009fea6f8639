# storefront/schemas/rating.py
from pydantic import ConfigDict
from sqlmodel import SQLModel, Field


class ProductRating(SQLModel):
    """
    Simulated rating for a product; fixed once generated.
    """

    rating: float = Field(ge=3.0, le=5.0)
    reviews_count: int = Field(ge=0)


class ProductRef(SQLModel):
    """
    Anything with a product id. Extra fields are ignored so whole
    product rows can be passed in.
    """

    model_config = ConfigDict(extra="ignore")

    id: str


class RatingsGenerateRequest(SQLModel):
    products: list[ProductRef]


class RatingStats(SQLModel):
    """
    Aggregates over every persisted rating.
    """

    model_config = ConfigDict(extra="forbid")

    total_products: int
    average_rating: float
    total_reviews: int
