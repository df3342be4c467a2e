# app/domains/interp/schemas.py

"""
'interp' 도메인 (해석 규칙 엔진)의 Pydantic 스키마를 정의하는 모듈입니다.

이 스키마들은 API 요청(Request) 및 응답(Response) 데이터의 유효성을 검사하고,
데이터를 직렬화(Serialization) 및 역직렬화(Deserialization)하는 데 사용됩니다.
"""

from typing import List, Optional, Dict, Any
from datetime import datetime
from pydantic import BaseModel, Field as PydanticField, model_validator

from .evaluator import parse_threshold
from .models import Comparator, Severity


# =============================================================================
# 1. 해석 규칙 (InterpretationRule) 스키마
# =============================================================================
class RuleBase(BaseModel):
    area: str = PydanticField(min_length=1, max_length=50, description="분석 분야 (예: nematologia)")
    species: Optional[str] = PydanticField(default=None, max_length=255, description="작물 종 필터")
    crop_next: Optional[str] = PydanticField(default=None, max_length=255, description="다음 작물 필터")
    analyte: str = PydanticField(min_length=1, max_length=255, description="분석 대상 패턴")
    comparator: Comparator = PydanticField(description="비교 연산자 (>, >=, =, in)")
    threshold: Dict[str, Any] = PydanticField(description="임계값 설정 (예: {\"value\": 100})")
    message: str = PydanticField(min_length=1, description="메시지 템플릿")
    severity: Severity = PydanticField(description="심각도 (low, moderate, high)")


class RuleCreate(RuleBase):
    active: bool = PydanticField(default=True, description="활성 여부")

    @model_validator(mode="after")
    def check_threshold(self) -> "RuleCreate":
        # 비교 연산자와 맞지 않는 임계값은 생성 시점에 거부하고, 저장 형태를 정규화합니다.
        parsed = parse_threshold(self.comparator, self.threshold)
        self.threshold = parsed.model_dump(exclude={"kind"})
        return self


class RuleResponse(RuleBase):
    id: int = PydanticField(description="규칙 고유 ID")
    area: Optional[str] = PydanticField(default=None, description="분석 분야")
    active: bool = PydanticField(description="활성 여부")
    created_at: Optional[datetime] = PydanticField(default=None, description="레코드 생성 일시")
    updated_at: Optional[datetime] = PydanticField(default=None, description="레코드 마지막 업데이트 일시")

    class Config:
        from_attributes = True


# =============================================================================
# 2. 적용된 해석 (AppliedInterpretation) 스키마
# =============================================================================
class AppliedInterpretationCreate(BaseModel):
    sample_id: int = PydanticField(description="시료 ID")
    rule_id: Optional[int] = PydanticField(default=None, description="적용된 규칙 ID")
    message: str = PydanticField(description="렌더링된 해석 메시지")
    severity: Severity = PydanticField(description="평가 시점의 규칙 심각도")


class AppliedInterpretationResponse(BaseModel):
    id: int = PydanticField(description="해석 고유 ID")
    sample_id: int = PydanticField(description="시료 ID")
    rule_id: Optional[int] = PydanticField(default=None, description="적용된 규칙 ID")
    message: str = PydanticField(description="렌더링된 해석 메시지")
    severity: Severity = PydanticField(description="심각도")
    created_at: Optional[datetime] = PydanticField(default=None, description="레코드 생성 일시")

    class Config:
        from_attributes = True


class AppliedInterpretationDetailResponse(AppliedInterpretationResponse):
    """조회용 응답 - 적용된 규칙 정보를 함께 반환합니다."""
    rule: Optional[RuleResponse] = PydanticField(default=None, description="적용된 규칙")


# =============================================================================
# 3. 평가 요청/응답 스키마
# =============================================================================
class EvaluateRequest(BaseModel):
    sample_id: int = PydanticField(description="평가할 시료 ID")
    background: bool = PydanticField(default=False, description="True 이면 ARQ 백그라운드 작업으로 실행")


class EvaluationResponse(BaseModel):
    message: str = PydanticField(description="처리 결과 메시지")
    applied_interpretations: List[AppliedInterpretationResponse] = PydanticField(description="새로 적용된 해석 목록")
    count: int = PydanticField(description="적용된 해석 개수")


class EvaluationQueuedResponse(BaseModel):
    message: str = PydanticField(description="처리 결과 메시지")
    sample_id: int = PydanticField(description="평가할 시료 ID")
    job_id: Optional[str] = PydanticField(default=None, description="ARQ 작업 ID")
