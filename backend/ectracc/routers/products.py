"""
API endpoints for the product catalog.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request

from ectracc.config import settings
from ectracc.core.errors import InvalidInputError
from ectracc.core.rate_limit import limiter
from ectracc.dependencies import get_catalog_service
from ectracc.schemas import BARCODE_PATTERN, OBJECT_ID_PATTERN, EcoGrade, SortOption
from ectracc.services.catalog_service import CatalogService

router = APIRouter()

MAX_CATEGORY_FILTERS = 10
MAX_CATEGORY_LENGTH = 50
MAX_ECO_FILTERS = 5


@router.get("/search")
@limiter.limit(settings.SEARCH_RATE_LIMIT)
async def search_products(
    request: Request,
    q: str = Query("", max_length=100),
    category: Optional[List[str]] = Query(None),
    ecoScore: Optional[List[EcoGrade]] = Query(None),
    page: int = Query(1, ge=1, le=1000),
    limit: int = Query(20, ge=1, le=50),
    sortBy: SortOption = "relevance",
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Search products with text, category and eco-score filters."""
    category = category or []
    if len(category) > MAX_CATEGORY_FILTERS or any(
        len(c) > MAX_CATEGORY_LENGTH for c in category
    ):
        raise InvalidInputError(
            f"Up to {MAX_CATEGORY_FILTERS} categories of at most {MAX_CATEGORY_LENGTH} characters",
            "search",
        )
    if ecoScore and len(ecoScore) > MAX_ECO_FILTERS:
        raise InvalidInputError(f"Up to {MAX_ECO_FILTERS} eco-score grades", "search")

    q = q.strip()
    result = await catalog.search(
        query=q,
        category=category,
        eco_score=ecoScore or [],
        page=page,
        limit=limit,
        sort_by=sortBy,
    )
    return {
        "success": True,
        "data": result["data"],
        "meta": {
            "pagination": result["pagination"],
            "query": {
                "q": q,
                "category": category,
                "ecoScore": ecoScore or [],
                "page": page,
                "limit": limit,
                "sortBy": sortBy,
            },
        },
    }


@router.get("/barcode/{code}")
@limiter.limit(settings.BARCODE_RATE_LIMIT)
async def get_by_barcode(
    request: Request,
    code: str = Path(..., pattern=BARCODE_PATTERN),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Find a product by its barcode."""
    product = await catalog.find_by_barcode(code)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"success": True, "data": product}


@router.get("/with-footprint")
async def list_with_footprint(
    page: int = Query(1, ge=1, le=1000),
    limit: int = Query(20, ge=1, le=50),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Products with carbon footprint data, lowest footprint first."""
    result = await catalog.get_with_footprint(page, limit)
    return {"success": True, "data": result["data"], "meta": {"pagination": result["pagination"]}}


@router.get("/stats")
async def get_stats(catalog: CatalogService = Depends(get_catalog_service)):
    """Basic catalog statistics."""
    return {"success": True, "data": await catalog.get_stats()}


@router.get("/{product_id}/alternatives")
async def get_alternatives(
    product_id: str = Path(..., pattern=OBJECT_ID_PATTERN),
    limit: int = Query(5, ge=1, le=10),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Suggest greener products from the same categories."""
    return {"success": True, "data": await catalog.get_suggested_alternatives(product_id, limit)}
