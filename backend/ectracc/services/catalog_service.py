"""
Catalog search engine: filtered full-text product search, barcode lookup,
catalog statistics and greener alternatives.

The engine only builds filter/sort/pipeline specifications and shapes the
results; the document store it is constructed with executes them.
"""

import asyncio
import logging
import math
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bson import ObjectId
from bson.errors import InvalidId

from ectracc.core.errors import store_operation

logger = logging.getLogger(__name__)

ECO_GRADES = ("A", "B", "C", "D", "E")
SORT_OPTIONS = ("relevance", "carbon_asc", "carbon_desc")

# Fields returned in listings; nutrition_info only comes back on barcode lookup
LIST_PROJECTION = {
    "_id": 1,
    "barcode": 1,
    "product_name": 1,
    "brands": 1,
    "categories": 1,
    "ecoscore_grade": 1,
    "carbon_footprint": 1,
    "last_updated": 1,
}
DETAIL_PROJECTION = {**LIST_PROJECTION, "nutrition_info": 1}

HAS_FOOTPRINT = {"carbon_footprint": {"$exists": True, "$ne": None, "$gt": 0}}

# Missing seed values compare as worst possible
WORST_GRADE_SENTINEL = "Z"
MISSING_FOOTPRINT_SENTINEL = 999999

TOP_CATEGORIES_LIMIT = 10


def _as_list(value) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def build_match_stage(
    category: Optional[Sequence[str]] = None, eco_score: Optional[Sequence[str]] = None
) -> Dict[str, Any]:
    """
    Structured filters: OR within one filter's values, AND across filters.

    Categories match case-insensitively anywhere inside any of a product's
    category strings.
    """
    match: Dict[str, Any] = {}
    categories = _as_list(category)
    if categories:
        match["categories"] = {
            "$in": [re.compile(re.escape(c), re.IGNORECASE) for c in categories]
        }
    grades = _as_list(eco_score)
    if grades:
        match["ecoscore_grade"] = {"$in": grades}
    return match


def build_search_pipeline(
    query: str = "",
    category: Optional[Sequence[str]] = None,
    eco_score: Optional[Sequence[str]] = None,
    sort_by: str = "relevance",
) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Return ``(results_pipeline, count_pipeline)`` without pagination stages.

    Text search has to be the first stage, so it narrows the candidate set
    before the structured filters intersect it.
    """
    text = (query or "").strip()
    filters: List[Dict[str, Any]] = []
    if text:
        filters.append({"$match": {"$text": {"$search": text}}})
    match = build_match_stage(category, eco_score)
    if match:
        filters.append({"$match": match})

    if sort_by == "carbon_asc":
        sort = {"carbon_footprint": 1}
    elif sort_by == "carbon_desc":
        sort = {"carbon_footprint": -1}
    elif text:
        sort = {"score": {"$meta": "textScore"}}
    else:
        sort = {"product_name": 1}

    projection = dict(LIST_PROJECTION)
    if text:
        projection["score"] = {"$meta": "textScore"}

    results = [*filters, {"$sort": sort}, {"$project": projection}]
    count = [*filters, {"$count": "total"}]
    return results, count


def build_pagination(page: int, limit: int, total: int, returned: int) -> Dict[str, Any]:
    skip = (page - 1) * limit
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "hasMore": skip + returned < total,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }


def build_stats_pipeline() -> List[Dict[str, Any]]:
    """A single ``$facet`` pass, so every statistic reads the same snapshot."""
    return [
        {
            "$facet": {
                "totalProducts": [{"$count": "count"}],
                "ecoScoreDistribution": [
                    {"$group": {"_id": "$ecoscore_grade", "count": {"$sum": 1}}},
                    {"$sort": {"_id": 1}},
                ],
                "topCategories": [
                    {"$unwind": "$categories"},
                    {"$group": {"_id": "$categories", "count": {"$sum": 1}}},
                    {"$sort": {"count": -1, "_id": 1}},
                    {"$limit": TOP_CATEGORIES_LIMIT},
                ],
                "carbonFootprintStats": [
                    {"$match": HAS_FOOTPRINT},
                    {
                        "$group": {
                            "_id": None,
                            "avg": {"$avg": "$carbon_footprint"},
                            "min": {"$min": "$carbon_footprint"},
                            "max": {"$max": "$carbon_footprint"},
                            "count": {"$sum": 1},
                        }
                    },
                ],
            }
        }
    ]


def build_alternatives_pipeline(seed: Dict[str, Any], limit: int = 5) -> List[Dict[str, Any]]:
    """Products sharing a category with the seed that beat it on grade or footprint."""
    seed_grade = seed.get("ecoscore_grade") or WORST_GRADE_SENTINEL
    seed_footprint = seed.get("carbon_footprint")
    if seed_footprint is None:
        seed_footprint = MISSING_FOOTPRINT_SENTINEL
    return [
        {
            "$match": {
                "_id": {"$ne": seed["_id"]},
                "categories": {"$in": seed.get("categories") or []},
                "$or": [
                    {"ecoscore_grade": {"$lt": seed_grade}},
                    {"carbon_footprint": {"$lt": seed_footprint, "$exists": True, "$ne": None}},
                ],
            }
        },
        {"$project": LIST_PROJECTION},
        {"$limit": limit},
    ]


def serialize_product(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Render ``_id`` as a string ``id`` for the HTTP layer."""
    data = {k: v for k, v in doc.items() if k != "_id"}
    if "_id" in doc:
        data = {"id": str(doc["_id"]), **data}
    return data


class CatalogService:
    """Stateless product search engine over an injected document store."""

    def __init__(self, store):
        self.store = store

    async def search(
        self,
        query: str = "",
        category: Optional[Sequence[str]] = None,
        eco_score: Optional[Sequence[str]] = None,
        page: int = 1,
        limit: int = 20,
        sort_by: str = "relevance",
    ) -> Dict[str, Any]:
        """
        Search the catalog.

        The page and the exact total of the filtered set are fetched
        concurrently; ``hasMore`` is derived from both.
        """
        results_pipeline, count_pipeline = build_search_pipeline(
            query, category, eco_score, sort_by
        )
        skip = (page - 1) * limit
        results_pipeline += [{"$skip": skip}, {"$limit": limit}]

        logger.debug(f"Catalog search q={query!r} category={category} eco={eco_score} sort={sort_by}")
        with store_operation("search"):
            results, count_rows = await asyncio.gather(
                self.store.aggregate(results_pipeline),
                self.store.aggregate(count_pipeline),
            )

        total = count_rows[0]["total"] if count_rows else 0
        return {
            "data": [serialize_product(doc) for doc in results],
            "pagination": build_pagination(page, limit, total, len(results)),
        }

    async def find_by_barcode(self, barcode: str) -> Optional[Dict[str, Any]]:
        """Exact barcode lookup; None when the catalog has no such product."""
        with store_operation("barcode"):
            doc = await self.store.find_one({"barcode": barcode}, DETAIL_PROJECTION)
        return serialize_product(doc) if doc else None

    async def get_with_footprint(self, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        """Products with a positive footprint, lowest first."""
        skip = (page - 1) * limit
        with store_operation("with_footprint"):
            results, total = await asyncio.gather(
                self.store.query(
                    HAS_FOOTPRINT,
                    sort=[("carbon_footprint", 1)],
                    skip=skip,
                    limit=limit,
                    projection=LIST_PROJECTION,
                ),
                self.store.count(HAS_FOOTPRINT),
            )
        return {
            "data": [serialize_product(doc) for doc in results],
            "pagination": build_pagination(page, limit, total, len(results)),
        }

    async def get_stats(self) -> Dict[str, Any]:
        """
        Catalog statistics from one faceted aggregate.

        A facet with no rows, or a missing facet document, resolves to its
        empty default instead of failing the whole call.
        """
        with store_operation("stats"):
            rows = await self.store.aggregate(build_stats_pipeline())
        facets = rows[0] if rows else {}

        total_rows = facets.get("totalProducts") or []
        carbon_rows = facets.get("carbonFootprintStats") or []
        carbon_stats = {"avg": 0, "min": 0, "max": 0, "count": 0}
        if carbon_rows:
            row = carbon_rows[0]
            carbon_stats = {key: row.get(key) or 0 for key in carbon_stats}

        return {
            "totalProducts": total_rows[0].get("count", 0) if total_rows else 0,
            "ecoScoreDistribution": facets.get("ecoScoreDistribution") or [],
            "topCategories": facets.get("topCategories") or [],
            "carbonFootprintStats": carbon_stats,
        }

    async def get_suggested_alternatives(self, product_id: str, limit: int = 5) -> List[Dict[str, Any]]:
        """Greener products in the seed's categories; [] when the seed is unknown."""
        try:
            oid = ObjectId(product_id)
        except (InvalidId, TypeError):
            return []

        with store_operation("alternatives"):
            seed = await self.store.find_one({"_id": oid})
            if not seed:
                return []
            docs = await self.store.aggregate(build_alternatives_pipeline(seed, limit))
        return [serialize_product(doc) for doc in docs]
