from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

router = APIRouter(tags=["health"])


class HealthOut(BaseModel):
    status: str
    message: str
    timestamp: datetime


@router.get("/", response_model=HealthOut, summary="Health check")
async def health():
    return HealthOut(
        status="ok",
        message="Expense Tracker API is running",
        timestamp=datetime.now(timezone.utc),
    )
