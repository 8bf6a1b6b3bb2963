from pydantic import BaseModel
from typing import List

class MonthlyAggregate(BaseModel):
    month: str  # YYYY-MM
    income: float
    expense: float

class ReportResponse(BaseModel):
    total_income: float
    total_expense: float
    balance: float
    monthly: List[MonthlyAggregate]
    total_movements: int
