"""
Meta router - threshold tables used for status classification.

Clients fetch the tables to draw reference bands on charts instead of
hardcoding boundaries.

No authentication required for read-only metadata access.
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from core.thresholds import ThresholdTables
from core.dependencies import get_threshold_tables

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/meta",
    tags=["Metadata"],
    # No authentication - public read-only endpoint
)


@router.get(
    "/thresholds",
    summary="Threshold tables",
    description="Glucose, blood pressure and heart rate bands plus BMI categories."
)
async def get_thresholds(
    tables: ThresholdTables = Depends(get_threshold_tables)
) -> Dict[str, Any]:
    return tables.to_dict()
