# app/domains/interp/evaluator.py

"""
해석 규칙의 조건 평가기(Condition Evaluator) 모듈입니다.

- 비교 연산자별 임계값 설정을 태그가 있는 변형 타입(NumericThreshold, FlagThreshold,
  SetThreshold)으로 한 번만 파싱합니다 (parse_threshold).
- 하나의 분석 결과가 규칙의 조건을 만족하는지 판정합니다 (evaluate_condition).
  평가는 절대 예외를 던지지 않으며, 타입이 맞지 않으면 False를 반환합니다.
"""

from numbers import Real
from typing import Any, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field as PydanticField, ValidationError

from .models import Comparator


# =============================================================================
# 1. 임계값 변형 타입
# =============================================================================
class NumericThreshold(BaseModel):
    """수치 비교용 임계값 ({"value": 100})"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["numeric"] = "numeric"
    value: float


class FlagThreshold(BaseModel):
    """정성 결과(플래그) 비교용 임계값 ({"flag": "positivo"})"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["flag"] = "flag"
    flag: str = PydanticField(min_length=1)


class SetThreshold(BaseModel):
    """허용값 목록 비교용 임계값 ({"values": ["positivo", "negativo"]})"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["set"] = "set"
    values: List[Union[float, str]] = PydanticField(min_length=1)


Threshold = Union[NumericThreshold, FlagThreshold, SetThreshold]


def _is_number(value: Any) -> bool:
    # bool은 int의 하위 클래스이므로 제외합니다.
    return isinstance(value, Real) and not isinstance(value, bool)


def parse_threshold(comparator: Union[Comparator, str], raw: Mapping[str, Any]) -> Threshold:
    """
    저장된 임계값 설정(JSON)을 비교 연산자에 맞는 변형 타입으로 변환합니다.

    Raises:
        ValueError: 비교 연산자가 알 수 없거나, 설정이 연산자와 맞지 않는 경우.
    """
    try:
        comparator = Comparator(comparator)
    except ValueError:
        raise ValueError(f"Unknown comparator: {comparator!r}") from None

    if not isinstance(raw, Mapping):
        raise ValueError("Threshold configuration must be an object")

    try:
        if comparator in (Comparator.GT, Comparator.GTE):
            if not _is_number(raw.get("value")):
                raise ValueError(f"Comparator '{comparator.value}' requires a numeric 'value'")
            return NumericThreshold(value=raw["value"])

        if comparator == Comparator.EQ:
            if raw.get("value") is not None:
                if not _is_number(raw["value"]):
                    raise ValueError("Comparator '=' requires 'value' to be numeric")
                return NumericThreshold(value=raw["value"])
            if raw.get("flag"):
                return FlagThreshold(flag=raw["flag"])
            raise ValueError("Comparator '=' requires either a numeric 'value' or a 'flag'")

        values = raw.get("values")
        if not isinstance(values, list) or not values:
            raise ValueError("Comparator 'in' requires a non-empty 'values' list")
        if not all(isinstance(v, str) or _is_number(v) for v in values):
            raise ValueError("Comparator 'in' accepts only strings and numbers in 'values'")
        return SetThreshold(values=values)
    except ValidationError as e:
        raise ValueError(str(e)) from e


# =============================================================================
# 2. 조건 평가
# =============================================================================
def _greater(result_value: Any, threshold: Threshold, *, inclusive: bool) -> bool:
    if not isinstance(threshold, NumericThreshold) or not _is_number(result_value):
        return False
    if inclusive:
        return result_value >= threshold.value
    return result_value > threshold.value


def _equals(result: Any, threshold: Threshold) -> bool:
    if isinstance(threshold, NumericThreshold):
        value = getattr(result, "result_value", None)
        return _is_number(value) and value == threshold.value
    if isinstance(threshold, FlagThreshold):
        return getattr(result, "result_flag", None) == threshold.flag
    return False


def _contains(result: Any, threshold: Threshold) -> bool:
    if not isinstance(threshold, SetThreshold):
        return False
    # 결과값, 플래그, 분석 대상명 중 하나라도 목록에 있으면 일치로 판정합니다.
    candidates = (
        getattr(result, "result_value", None),
        getattr(result, "result_flag", None),
        getattr(result, "analyte", None),
    )
    return any(
        candidate is not None and not isinstance(candidate, bool) and candidate in threshold.values
        for candidate in candidates
    )


def evaluate_condition(result: Any, comparator: Union[Comparator, str, None], threshold: Optional[Threshold]) -> bool:
    """
    분석 결과 하나가 규칙의 비교 연산자와 임계값을 만족하는지 판정합니다.

    Args:
        result: result_value, result_flag, analyte 속성을 가진 분석 결과 객체.
        comparator: 비교 연산자 (">", ">=", "=", "in").
        threshold: parse_threshold로 변환된 임계값.

    Returns:
        bool: 조건 만족 여부. 알 수 없는 연산자나 타입 불일치는 False.
    """
    if threshold is None:
        return False
    if comparator == Comparator.GT:
        return _greater(getattr(result, "result_value", None), threshold, inclusive=False)
    if comparator == Comparator.GTE:
        return _greater(getattr(result, "result_value", None), threshold, inclusive=True)
    if comparator == Comparator.EQ:
        return _equals(result, threshold)
    if comparator == Comparator.IN:
        return _contains(result, threshold)
    return False
