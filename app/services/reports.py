import logging
from collections import defaultdict
from datetime import datetime, timezone, tzinfo
from typing import Iterable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core import policy
from app.core.config import CSV_MAX_RECORDS
from app.core.errors import FieldIssue, Forbidden, ValidationError, returns_result
from app.models.enums import MovementType
from app.repositories.movements import MovementRepository
from app.repositories.users import UserRepository
from app.schemas.report import MonthlyAggregate, ReportResponse
from app.schemas.user import Principal
from app.utils.csv_export import generate_movements_csv

logger = logging.getLogger(__name__)


def _resolve_zone(tz: Optional[str]) -> tzinfo:
    if not tz or tz.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        raise ValidationError(issues=[FieldIssue(field="tz", message=f"Zona horaria desconocida: {tz}")])


def _month_key(dt: datetime, zone: tzinfo) -> str:
    """Mes local YYYY-MM de un datetime UTC (naive o tz-aware)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    local = dt.astimezone(zone)
    return f"{local.year:04d}-{local.month:02d}"


def aggregate_movements(movements: Iterable, zone: tzinfo = timezone.utc, total_movements: Optional[int] = None) -> ReportResponse:
    total_income = 0.0
    total_expense = 0.0
    by_month = defaultdict(lambda: {"income": 0.0, "expense": 0.0})
    count = 0

    for movement in movements:
        count += 1
        amount = float(movement.amount)
        bucket = by_month[_month_key(movement.date, zone)]
        if movement.type == MovementType.INCOME:
            total_income += amount
            bucket["income"] += amount
        else:
            total_expense += amount
            bucket["expense"] += amount

    monthly = [
        MonthlyAggregate(month=month, income=v["income"], expense=v["expense"])
        for month, v in sorted(by_month.items())
    ]
    return ReportResponse(
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income - total_expense,
        monthly=monthly,
        total_movements=count if total_movements is None else total_movements,
    )


class ReportService:
    def __init__(self, movements: MovementRepository, users: UserRepository, max_csv_records: int = CSV_MAX_RECORDS):
        self.movements = movements
        self.users = users
        self.max_csv_records = max_csv_records

    def _require_admin(self, principal: Optional[Principal]) -> Principal:
        principal = policy.require_principal(principal)
        if not policy.can_view_reports(principal, self.users.role_of):
            logger.info("Usuario %s sin rol ADMIN intentó ver reportes", principal.id)
            raise Forbidden("No autorizado, se requiere rol de administrador")
        return principal

    @returns_result
    def build_report(self, principal: Optional[Principal], tz: Optional[str] = None) -> ReportResponse:
        self._require_admin(principal)
        zone = _resolve_zone(tz)
        total = self.movements.count()
        movements = self.movements.find_many(newest_first=False)
        return aggregate_movements(movements, zone, total_movements=total)

    @returns_result
    def export_csv(self, principal: Optional[Principal]) -> str:
        self._require_admin(principal)
        # Tope de registros para acotar memoria y latencia
        movements = self.movements.find_many(take=self.max_csv_records, with_user=True)
        if len(movements) == self.max_csv_records:
            logger.warning("Exportación CSV truncada a %s movimientos", self.max_csv_records)
        return generate_movements_csv(movements)
