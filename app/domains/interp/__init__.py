# app/domains/interp/__init__.py

"""
FastAPI 애플리케이션의 'interp' 도메인 패키지입니다.

이 패키지는 PostgreSQL의 'interp' 스키마에 해당하는 해석 규칙 엔진을 포함합니다.
시료의 분석 결과를 규칙 목록과 비교하여, 일치하는 규칙마다 메시지를 렌더링하고
적용된 해석(AppliedInterpretation)으로 저장합니다.

주요 서브모듈:
- `models.py`: 해석 규칙(InterpretationRule)과 적용된 해석(AppliedInterpretation) SQLModel 정의.
- `schemas.py`: API 요청 및 응답 유효성 검사를 위한 Pydantic 모델.
- `evaluator.py`: 비교 연산자별 조건 평가기와 임계값 변형 타입.
- `renderer.py`: 메시지 템플릿 분해/렌더링.
- `matcher.py`: 규칙 컴파일과 시료 결과 매칭.
- `crud.py`: 규칙 및 해석 저장소와 활성 규칙 캐시.
- `services.py`: 평가 패스를 조율하는 InterpretationService.
- `routers.py`: FastAPI API 엔드포인트 정의.
- `tasks.py`: ARQ 백그라운드 작업.
"""

# 패키지 메타데이터 (선택 사항)
__title__ = "Phyto LIMS Interpretation Domain"
__description__ = "Evaluates diagnostic interpretation rules against sample results."
__version__ = "0.1.0"  # interp 도메인 패키지의 버전
__all__ = []  # 'from app.domains.interp import *' 시 내보낼 이름 목록. 일반적으로 비워둡니다.
