"""Recommendation endpoints for the ZidRec API.

This module provides API endpoints for recommending products from a viewed
product or from the contents of a shopping cart. Invalid input never
produces an error: it is treated as "no signal" and yields an empty list.
"""

import logging
import time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, Field, field_validator

from zidrec.api.deps import get_recommender, get_snapshot_manager
from zidrec.api.metrics import metrics_service
from zidrec.recommender.engine import Recommender
from zidrec.recommender.fields import to_int
from zidrec.recommender.snapshot import SnapshotManager

# Configure module logger
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(
    prefix="/api/recommendations",
    tags=["recommendations"],
)


class RecommendedProduct(BaseModel):
    """Public shape of a recommended product.

    Attributes:
        id: Product ID, or None if the upstream record had none.
        title: Product title as provided by Zid.
        image: Image URL, empty if the product has no image.
        price: Price as provided by Zid, 0 if absent.
    """

    id: Optional[int] = Field(None, description="Product ID")
    title: Any = Field("", description="Product title")
    image: Any = Field("", description="Product image URL")
    price: Any = Field(0, description="Product price")


class CartRequest(BaseModel):
    """Request body for cart recommendations.

    Attributes:
        product_ids: IDs of the products in the cart. Entries that are not
            integers become 0 and are ignored.
    """

    product_ids: List[int] = Field(
        default_factory=list, description="Product IDs in the cart"
    )

    @field_validator("product_ids", mode="before")
    @classmethod
    def coerce_product_ids(cls, value: Any) -> List[int]:
        if not isinstance(value, list):
            return []
        return [to_int(item) or 0 for item in value]


async def read_cart_ids(request: Request) -> List[int]:
    """Positive product ids from a cart request body.

    A body that is missing, is not JSON or is not a JSON object is an empty
    cart.
    """
    try:
        body = await request.json()
    except ValueError:
        return []
    if not isinstance(body, dict):
        return []
    cart = CartRequest.model_validate(body)
    return [pid for pid in cart.product_ids if pid > 0]


class SnapshotStatus(BaseModel):
    loaded: bool
    source: Optional[str] = None
    loaded_at: Optional[str] = None
    num_products: int = 0
    num_orders: int = 0
    num_pairs: int = 0


@router.get("/product", response_model=List[RecommendedProduct])
def recommend_for_product(
    product_id: Optional[str] = Query(None, description="Viewed product ID"),
    recommender: Recommender = Depends(get_recommender),
) -> List[Dict[str, Any]]:
    """Get products frequently bought together with a product.

    Args:
        product_id: ID of the viewed product. Missing or non-numeric values
            behave as 0 and return an empty list.
        recommender: Recommender over the loaded snapshot.

    Returns:
        Up to 5 recommended products.

    Example:
        GET /api/recommendations/product?product_id=42
    """
    start_time = time.time()
    recommendations = recommender.recommend_for_product(to_int(product_id) or 0)
    metrics_service.record_recommendation(
        "product",
        (time.time() - start_time) * 1000,
        len(recommendations),
    )
    return recommendations


@router.post("/cart", response_model=List[RecommendedProduct])
def recommend_for_cart(
    cart_ids: List[int] = Depends(read_cart_ids),
    recommender: Recommender = Depends(get_recommender),
) -> List[Dict[str, Any]]:
    """Get products frequently bought together with a cart.

    Args:
        cart_ids: Product ids read from the JSON body (see
            :func:`read_cart_ids`).
        recommender: Recommender over the loaded snapshot.

    Returns:
        Up to 5 recommended products, none of them already in the cart.

    Example:
        POST /api/recommendations/cart {"product_ids": [12, 57]}
    """
    start_time = time.time()
    recommendations = recommender.recommend_for_cart(cart_ids)
    metrics_service.record_recommendation(
        "cart",
        (time.time() - start_time) * 1000,
        len(recommendations),
    )
    return recommendations


@router.post("/reload", response_model=SnapshotStatus)
def reload_snapshot(
    manager: SnapshotManager = Depends(get_snapshot_manager),
) -> Dict[str, Any]:
    """Refetch catalog and orders from Zid and rebuild the model.

    The new snapshot replaces the current one only once it is fully built;
    requests already in flight keep using the previous one.
    """
    logger.info("Reloading snapshot from Zid API")
    snapshot = manager.refresh(force_fetch=True)
    return snapshot.status()
