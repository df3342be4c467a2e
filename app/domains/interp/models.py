# app/domains/interp/models.py

"""
'interp' 도메인 (PostgreSQL 'interp' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

- InterpretationRule: 조건(분석 대상, 비교 연산자, 임계값)과 메시지 템플릿을 가진 해석 규칙.
- AppliedInterpretation: 특정 시료에 규칙이 적용된 결과 (렌더링된 메시지 포함).
"""

from typing import Optional, Dict, Any
from datetime import datetime, UTC
from enum import Enum

from sqlalchemy import JSON, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

from sqlmodel import Field, Relationship, SQLModel, Column


class Comparator(str, Enum):
    """규칙이 결과값을 임계값과 비교하는 방식"""
    GT = ">"
    GTE = ">="
    EQ = "="
    IN = "in"


class Severity(str, Enum):
    """해석의 심각도"""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


# =============================================================================
# 1. interp.rules 테이블 모델
# =============================================================================
class InterpretationRule(SQLModel, table=True):
    __tablename__ = "rules"
    __table_args__ = {'schema': 'interp'}

    id: Optional[int] = Field(default=None, primary_key=True)
    area: Optional[str] = Field(default=None, max_length=50, index=True, description="분석 분야 필터 (예: nematologia)")
    species: Optional[str] = Field(default=None, max_length=255, description="작물 종 필터 (정확히 일치)")
    crop_next: Optional[str] = Field(default=None, max_length=255, description="다음 작물 필터 (정확히 일치)")
    analyte: str = Field(max_length=255, description="분석 대상 패턴 (대소문자 무시 부분 일치)")
    comparator: Comparator = Field(sa_column=Column(String(4), nullable=False), description="비교 연산자")
    # 비교 연산자에 따라 {"value": 100}, {"flag": "positivo"}, {"values": [...]} 형태
    threshold: Dict[str, Any] = Field(
        sa_column=Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False),
        description="비교 연산자별 임계값 설정"
    )
    message: str = Field(description="메시지 템플릿 ({analyte}, {value} 등 치환자 포함)")
    severity: Severity = Field(sa_column=Column(String(10), nullable=False), description="심각도")
    active: bool = Field(default=True, index=True, description="활성 여부 - 비활성화 시 False")
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


# =============================================================================
# 2. interp.applied_interpretations 테이블 모델
# =============================================================================
class AppliedInterpretation(SQLModel, table=True):
    __tablename__ = "applied_interpretations"
    __table_args__ = {'schema': 'interp'}

    id: Optional[int] = Field(default=None, primary_key=True)
    sample_id: int = Field(foreign_key="lims.samples.id", index=True, description="시료 ID (FK)")
    # 규칙은 삭제되지 않고 비활성화만 되므로 조회용 참조로만 사용합니다.
    rule_id: Optional[int] = Field(default=None, foreign_key="interp.rules.id", description="적용된 규칙 ID (FK)")
    message: str = Field(description="렌더링된 해석 메시지")
    severity: Severity = Field(sa_column=Column(String(10), nullable=False), description="평가 시점의 규칙 심각도")
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )

    rule: Optional["InterpretationRule"] = Relationship()
