# storefront/routers/ratings.py
from fastapi import APIRouter, Depends, HTTPException, Response, status

from storefront.dependencies import get_rating_service, require_admin
from storefront.schemas.rating import ProductRating, RatingsGenerateRequest, RatingStats
from storefront.services.rating_service import RatingService

router = APIRouter(prefix="/ratings", tags=["Ratings"])


@router.post("/generate", response_model=dict[str, ProductRating])
def generate_ratings(
    payload: RatingsGenerateRequest,
    service: RatingService = Depends(get_rating_service),
):
    """
    Ratings for the given products; unseen ids get a new simulated rating.
    """
    return service.generate_product_ratings(payload.products)


@router.get(
    "/stats",
    response_model=RatingStats,
    dependencies=[Depends(require_admin)],
)
def get_rating_stats(service: RatingService = Depends(get_rating_service)):
    """
    Aggregates over all stored ratings. Admin session required.
    """
    return service.get_rating_stats()


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def clear_ratings(service: RatingService = Depends(get_rating_service)):
    """
    Drop every stored rating. Admin session required.
    """
    service.clear_all_ratings()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/products/{product_id}", response_model=ProductRating)
def get_rating(
    product_id: str,
    service: RatingService = Depends(get_rating_service),
):
    rating = service.get_product_rating(product_id)
    if rating is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No rating generated for this product",
        )
    return rating
