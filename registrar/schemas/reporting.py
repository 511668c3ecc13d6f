# registrar/schemas/reporting.py - Statistics and tariff schemas
from pydantic import BaseModel
from typing import List, Optional
from decimal import Decimal


class SexCount(BaseModel):
    sex: Optional[str]
    count: int


class GradeLevelCount(BaseModel):
    grade_level: Optional[str]
    count: int


class ServiceCount(BaseModel):
    service_type: str
    count: int


class StatisticsOut(BaseModel):
    total: int
    by_sex: List[SexCount]
    by_grade_level: List[GradeLevelCount]
    new_last_30_days: int
    by_service_type: List[ServiceCount]


class TariffOut(BaseModel):
    grade_level: str
    enrollment_fee: Decimal
    monthly_fee: Decimal
    re_enrollment_fee: Decimal

    class Config:
        from_attributes = True
