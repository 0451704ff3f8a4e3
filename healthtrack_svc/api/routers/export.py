"""
Export router - CSV download of a user's measurements.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from models.measurement import MeasurementType
from services import ExportService
from services.export_service import CSV_FILENAME
from core.auth import verify_api_key
from core.dependencies import get_export_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/export",
    tags=["Export"],
    dependencies=[Depends(verify_api_key)],
)


@router.get(
    "/measurements",
    summary="Export measurements as CSV",
    description="Columns Date, Type, Value, Notes with every field quoted, newest first.",
    response_class=Response,
    responses={200: {"content": {"text/csv": {}}}},
)
async def export_measurements(
    user_id: int = Query(..., ge=1),
    type: Optional[MeasurementType] = Query(None),
    export_service: ExportService = Depends(get_export_service)
):
    content = export_service.export_csv(user_id=user_id, measurement_type=type)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={CSV_FILENAME}"},
    )
