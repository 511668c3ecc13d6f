# registrar/models/tariff.py - Fee schedule per grade level and the matricule counter
from __future__ import annotations
import uuid
from decimal import Decimal
from sqlalchemy import String, Integer, BigInteger, Numeric, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from registrar.models.base import Base


class Tariff(Base):
    __tablename__ = "tariffs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    grade_level: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    enrollment_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    monthly_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    re_enrollment_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    # keeps the schedule in school order (PPS first, Hifz last)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class MatriculeCounter(Base):
    """Single-row counters incremented atomically when a matricule is issued"""
    __tablename__ = "matricule_counters"

    name: Mapped[str] = mapped_column(String(32), primary_key=True)
    last_value: Mapped[int] = mapped_column(BigInteger, nullable=False)
