# storefront/services/rating_service.py
import math
import random
from typing import Iterable

from pydantic import TypeAdapter

from storefront.core.local_storage import LocalStorage, StorageSchema
from storefront.schemas.rating import ProductRating, ProductRef, RatingStats

PRODUCT_RATINGS = StorageSchema(
    key="sdms_product_ratings",
    adapter=TypeAdapter(dict[str, ProductRating]),
    default_factory=dict,
)

# (upper bound of the cumulative draw, low, high) for the rating value
RATING_BANDS: tuple[tuple[float, float, float], ...] = (
    (0.70, 4.0, 5.0),
    (0.95, 3.5, 4.0),
    (1.00, 3.0, 3.5),
)

# (minimum rating, base review count); first match wins
REVIEW_BASES: tuple[tuple[float, int], ...] = (
    (4.5, 150),
    (4.0, 100),
    (3.5, 50),
    (0.0, 25),
)


def _round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


class RatingService:
    """
    Simulated product ratings, persisted per client.

    A product's rating is drawn once, on first sight, and reused from
    storage afterwards until clear_all_ratings() is called. The random
    source is injected so tests can seed it.
    """

    def __init__(self, storage: LocalStorage, rng: random.Random | None = None):
        self.storage = storage
        self.rng = rng or random.Random()

    # ---- generation ----

    def _random_rating(self) -> float:
        draw = self.rng.random()
        for upper, low, high in RATING_BANDS:
            if draw < upper:
                break
        return _round_half_up(self.rng.uniform(low, high), 1)

    def _review_count(self, rating: float) -> int:
        base = next(count for floor, count in REVIEW_BASES if rating >= floor)
        variance = self.rng.uniform(0.6, 1.4)
        return int(_round_half_up(base * variance))

    def generate_single_product_rating(self) -> ProductRating:
        """Draw a rating without persisting it."""
        rating = self._random_rating()
        return ProductRating(rating=rating, reviews_count=self._review_count(rating))

    # ---- persisted operations ----

    def get_product_rating(self, product_id: str) -> ProductRating | None:
        return self.storage.load(PRODUCT_RATINGS).get(product_id)

    def generate_product_ratings(
        self,
        products: Iterable[ProductRef],
    ) -> dict[str, ProductRating]:
        """
        Return a rating for every given product.

        Known ids reuse their stored rating; unknown ids get a fresh draw.
        The full stored map (old and new entries) is written back.
        """
        stored = self.storage.load(PRODUCT_RATINGS)
        result: dict[str, ProductRating] = {}

        for product in products:
            rating = stored.get(product.id)
            if rating is None:
                rating = self.generate_single_product_rating()
                stored[product.id] = rating
            result[product.id] = rating

        self.storage.save(PRODUCT_RATINGS, stored)
        return result

    def clear_all_ratings(self) -> None:
        self.storage.remove(PRODUCT_RATINGS)

    def get_rating_stats(self) -> RatingStats:
        ratings = list(self.storage.load(PRODUCT_RATINGS).values())
        if not ratings:
            return RatingStats(total_products=0, average_rating=0.0, total_reviews=0)

        average = sum(r.rating for r in ratings) / len(ratings)
        return RatingStats(
            total_products=len(ratings),
            average_rating=_round_half_up(average, 1),
            total_reviews=sum(r.reviews_count for r in ratings),
        )
