# app/domains/lims/models.py

"""
'lims' 도메인 (PostgreSQL 'lims' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

시료(Sample) → 시료 단위(SampleUnit) → 단위별 분석 결과(UnitResult) 의 3단계 구조이며,
해석 규칙 엔진은 이 구조를 한 번에 읽어 규칙을 평가합니다.
"""

from typing import Optional, List
from datetime import datetime, UTC

from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP, DOUBLE_PRECISION

from sqlmodel import Field, Relationship, SQLModel, Column


# =============================================================================
# 1. lims.samples 테이블 모델
# =============================================================================
class Sample(SQLModel, table=True):
    __tablename__ = "samples"
    __table_args__ = {'schema': 'lims'}

    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(max_length=32, unique=True, description="시료 코드")
    species: str = Field(max_length=255, description="작물 종 (예: Tomate)")
    variety: Optional[str] = Field(default=None, max_length=255, description="품종")
    previous_crop: Optional[str] = Field(default=None, max_length=255, description="이전 작물")
    next_crop: Optional[str] = Field(default=None, max_length=255, description="다음 작물")
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )

    # --- 관계 정의 ---
    units: List["SampleUnit"] = Relationship(
        back_populates="sample",
        sa_relationship_kwargs={'cascade': 'all, delete-orphan', 'order_by': 'SampleUnit.id'}
    )


# =============================================================================
# 2. lims.sample_units 테이블 모델
# =============================================================================
class SampleUnit(SQLModel, table=True):
    __tablename__ = "sample_units"
    __table_args__ = {'schema': 'lims'}

    id: Optional[int] = Field(default=None, primary_key=True)
    sample_id: int = Field(foreign_key="lims.samples.id", index=True)
    code: Optional[str] = Field(default=None, max_length=50, description="단위 코드")
    label: Optional[str] = Field(default=None, max_length=255, description="단위 표시명")
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )

    sample: "Sample" = Relationship(back_populates="units")
    results: List["UnitResult"] = Relationship(
        back_populates="unit",
        sa_relationship_kwargs={'cascade': 'all, delete-orphan', 'order_by': 'UnitResult.id'}
    )


# =============================================================================
# 3. lims.unit_results 테이블 모델
# =============================================================================
class UnitResult(SQLModel, table=True):
    __tablename__ = "unit_results"
    __table_args__ = {'schema': 'lims'}

    id: Optional[int] = Field(default=None, primary_key=True)
    unit_id: int = Field(foreign_key="lims.sample_units.id", index=True)
    analyte: Optional[str] = Field(default=None, max_length=255, description="분석 대상 (병원체명 등)")
    result_value: Optional[float] = Field(default=None, sa_column=Column(DOUBLE_PRECISION), description="정량 결과값")
    result_flag: Optional[str] = Field(default=None, max_length=50, description="정성 결과 (예: positivo)")
    test_area: Optional[str] = Field(default=None, max_length=50, description="분석 분야 (예: nematologia)")
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )

    unit: "SampleUnit" = Relationship(back_populates="results")
