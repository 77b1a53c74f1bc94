"""
API endpoints for personal footprint tracking, history and goals.
"""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request

from ectracc.config import settings
from ectracc.core.rate_limit import limiter
from ectracc.dependencies import get_current_user_id, get_footprint_service
from ectracc.schemas import FootprintCreate, GoalUpsert, Period
from ectracc.services.footprint_service import FootprintService

router = APIRouter()


@router.post("/track")
@limiter.limit(settings.TRACK_RATE_LIMIT)
def track_footprint(
    request: Request,
    entry: FootprintCreate,
    user_id: str = Depends(get_current_user_id),
    footprints: FootprintService = Depends(get_footprint_service),
):
    """Log a carbon footprint entry."""
    return {"success": True, "data": footprints.track(user_id, entry.model_dump())}


@router.get("/history")
def get_history(
    period: Period = "weekly",
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    page: int = Query(1, ge=1, le=100),
    limit: int = Query(50, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    footprints: FootprintService = Depends(get_footprint_service),
):
    """Footprint history grouped by week or month."""
    data = footprints.history(user_id, period, start_date, end_date, page, limit)
    return {"success": True, "data": data}


@router.get("/category-breakdown")
def get_category_breakdown(
    period: Period = "monthly",
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    user_id: str = Depends(get_current_user_id),
    footprints: FootprintService = Depends(get_footprint_service),
):
    """Share of each category in the user's footprint."""
    data = footprints.category_breakdown(user_id, period, start_date, end_date)
    return {"success": True, "data": data}


@router.get("/goals")
def list_goals(
    user_id: str = Depends(get_current_user_id),
    footprints: FootprintService = Depends(get_footprint_service),
):
    return {"success": True, "data": footprints.list_goals(user_id)}


@router.post("/goals")
def upsert_goal(
    goal: GoalUpsert,
    user_id: str = Depends(get_current_user_id),
    footprints: FootprintService = Depends(get_footprint_service),
):
    """Create the goal for a timeframe, or update the existing one."""
    return {"success": True, "data": footprints.upsert_goal(user_id, goal.model_dump())}
