# app/domains/interp/matcher.py

"""
규칙 매처(Rule Matcher) 모듈입니다.

활성 규칙 목록을 한 번 컴파일(임계값 파싱 + 메시지 템플릿 분해)한 뒤,
시료의 모든 단위/결과에 대해 분야(area), 작물 종(species), 다음 작물(crop_next)
필터와 분석 대상(analyte) 부분 일치를 적용하고 조건 평가기를 실행합니다.
"""

import logging
from typing import Any, Iterable, List, NamedTuple, Optional

from .evaluator import Threshold, evaluate_condition, parse_threshold
from .renderer import MessageTemplate

logger = logging.getLogger(__name__)


class RuleSnapshot(NamedTuple):
    """세션과 분리된 규칙 값의 복사본. 캐시에 보관해도 ORM 세션 상태의 영향을 받지 않습니다."""
    id: Any
    area: Optional[str]
    species: Optional[str]
    crop_next: Optional[str]
    analyte: Optional[str]
    comparator: Any
    severity: Any
    message: str

    @classmethod
    def of(cls, rule: Any) -> "RuleSnapshot":
        return cls(
            id=rule.id, area=rule.area, species=rule.species, crop_next=rule.crop_next,
            analyte=rule.analyte, comparator=rule.comparator, severity=rule.severity, message=rule.message,
        )


class CompiledRule(NamedTuple):
    """평가 준비가 끝난 규칙 (규칙 값 복사본, 파싱된 임계값, 분해된 템플릿)"""
    rule: RuleSnapshot
    threshold: Threshold
    template: MessageTemplate


class RuleMatch(NamedTuple):
    """규칙 하나와 그 규칙을 만족한 결과 하나의 쌍"""
    rule: CompiledRule
    result: Any
    unit: Any


def compile_rules(rules: Iterable[Any]) -> List[CompiledRule]:
    """
    저장된 규칙들을 평가 가능한 형태로 변환합니다.
    ORM 인스턴스는 값만 복사하므로 결과 목록은 로드한 세션이 닫히거나 롤백되어도 유효합니다.
    임계값 설정이 비교 연산자와 맞지 않는 규칙은 경고 로그를 남기고 건너뜁니다.
    """
    compiled = []
    for rule in rules:
        try:
            threshold = parse_threshold(rule.comparator, rule.threshold)
        except ValueError as e:
            logger.warning("Skipping interpretation rule %s: invalid threshold (%s)", rule.id, e)
            continue
        compiled.append(CompiledRule(RuleSnapshot.of(rule), threshold, MessageTemplate.compile(rule.message)))
    return compiled


def _iter_results(sample: Any):
    for unit in getattr(sample, "units", None) or []:
        for result in getattr(unit, "results", None) or []:
            yield unit, result


def _area_present(sample: Any, area: str) -> bool:
    return any(result.test_area == area for _, result in _iter_results(sample))


def match_rules(sample: Any, rules: Iterable[CompiledRule]) -> List[RuleMatch]:
    """
    시료에 대해 규칙을 순서대로 평가하여 일치 목록을 반환합니다.

    1. 규칙에 분야가 있으면 시료 결과 중 하나 이상이 같은 분야여야 합니다.
    2. 규칙에 작물 종이 있으면 시료의 작물 종과 같아야 합니다.
    3. 규칙에 다음 작물이 있으면 시료의 다음 작물과 같아야 합니다.
    4. 분석 대상명이 대소문자 무시 부분 일치하는 결과마다 조건을 평가합니다.

    빈 문자열 필터는 지정되지 않은 것으로 취급합니다.
    """
    matches: List[RuleMatch] = []
    for compiled in rules:
        rule = compiled.rule

        if rule.area and not _area_present(sample, rule.area):
            continue
        if rule.species and rule.species != sample.species:
            continue
        if rule.crop_next and rule.crop_next != sample.next_crop:
            continue

        pattern = (rule.analyte or "").lower()
        for unit, result in _iter_results(sample):
            if not result.analyte or pattern not in result.analyte.lower():
                continue
            if evaluate_condition(result, rule.comparator, compiled.threshold):
                matches.append(RuleMatch(compiled, result, unit))
    return matches
