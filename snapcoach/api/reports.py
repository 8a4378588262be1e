"""API endpoints for weekly trend reports."""

from fastapi import APIRouter

from snapcoach.models.daily_log import DailyLog
from snapcoach.models.weekly_report import WeeklyReport
from snapcoach.services.weekly_service import analyze_week

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("/weekly", response_model=WeeklyReport)
async def weekly_report(logs: list[DailyLog]):
    """
    Summarize a week of daily logs.

    Supply exactly seven logs: average protein is always divided by 7.
    """
    return analyze_week(logs)
