# app/domains/interp/renderer.py

"""
해석 메시지 템플릿 렌더러 모듈입니다.

규칙의 메시지 템플릿을 한 번만 분해(compile)해 두고, 일치하는 결과마다
재사용하여 치환자를 채워 넣습니다.

지원 치환자:
    {analyte}, {value}, {flag}, {unit_code}, {unit_label},
    {species}, {variety}, {sample_code}

값이 없거나 빈 문자열이면 'N/A'로 표시하며, 알 수 없는 치환자는 그대로 남깁니다.
"""

import re
from typing import Any, Callable, Dict, List, Tuple, Union

NOT_AVAILABLE = "N/A"

PLACEHOLDER_PATTERN = re.compile(
    r"\{(analyte|value|flag|unit_code|unit_label|species|variety|sample_code)\}"
)


def format_value(value: Any) -> str:
    """치환 값 하나를 문자열로 변환합니다. 정수로 떨어지는 실수는 소수점 없이 표시합니다."""
    if value is None:
        return NOT_AVAILABLE
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    text = str(value)
    return text if text != "" else NOT_AVAILABLE


# 치환자 이름 -> (결과, 단위, 시료) 에서 값을 꺼내는 함수
_RESOLVERS: Dict[str, Callable[[Any, Any, Any], Any]] = {
    "analyte": lambda result, unit, sample: getattr(result, "analyte", None),
    "value": lambda result, unit, sample: getattr(result, "result_value", None),
    "flag": lambda result, unit, sample: getattr(result, "result_flag", None),
    "unit_code": lambda result, unit, sample: getattr(unit, "code", None),
    "unit_label": lambda result, unit, sample: getattr(unit, "label", None),
    "species": lambda result, unit, sample: getattr(sample, "species", None),
    "variety": lambda result, unit, sample: getattr(sample, "variety", None),
    "sample_code": lambda result, unit, sample: getattr(sample, "code", None),
}


class MessageTemplate:
    """
    미리 분해된 메시지 템플릿.

    템플릿 문자열은 리터럴 조각(str)과 치환자 이름(tuple)의 목록으로 저장됩니다.
    """

    def __init__(self, source: str, parts: List[Union[str, Tuple[str]]]):
        self.source = source
        self._parts = parts

    @classmethod
    def compile(cls, template: str) -> "MessageTemplate":
        parts: List[Union[str, Tuple[str]]] = []
        position = 0
        for match in PLACEHOLDER_PATTERN.finditer(template or ""):
            if match.start() > position:
                parts.append(template[position:match.start()])
            parts.append((match.group(1),))
            position = match.end()
        if position < len(template or ""):
            parts.append(template[position:])
        return cls(template or "", parts)

    @property
    def placeholders(self) -> List[str]:
        return [part[0] for part in self._parts if isinstance(part, tuple)]

    def render(self, result: Any, unit: Any, sample: Any) -> str:
        """결과, 단위, 시료의 값으로 치환자를 채운 메시지를 반환합니다."""
        rendered = []
        for part in self._parts:
            if isinstance(part, tuple):
                rendered.append(format_value(_RESOLVERS[part[0]](result, unit, sample)))
            else:
                rendered.append(part)
        return "".join(rendered)

    def __repr__(self) -> str:
        return f"MessageTemplate({self.source!r})"


def render_message(template: str, result: Any, unit: Any, sample: Any) -> str:
    """일회성 렌더링용 편의 함수 (매번 템플릿을 분해합니다)."""
    return MessageTemplate.compile(template).render(result, unit, sample)
