from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from app.api.deps import get_report_service
from app.api.responses import unwrap
from app.core.security import get_current_principal
from app.schemas.report import ReportResponse
from app.schemas.user import Principal
from app.services.reports import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])

CSV_FILENAME = "movements-report.csv"


@router.get("", response_model=ReportResponse)
@router.get("/", response_model=ReportResponse)
def get_report(
    tz: Optional[str] = Query(None, description="Zona horaria IANA para agrupar por mes, ej. America/Bogota"),
    principal: Optional[Principal] = Depends(get_current_principal),
    service: ReportService = Depends(get_report_service),
):
    return unwrap(service.build_report(principal, tz))


@router.get("/csv")
def export_report_csv(
    principal: Optional[Principal] = Depends(get_current_principal),
    service: ReportService = Depends(get_report_service),
):
    content = unwrap(service.export_csv(principal))
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{CSV_FILENAME}"'},
    )
