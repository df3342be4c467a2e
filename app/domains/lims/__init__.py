# app/domains/lims/__init__.py

"""
FastAPI 애플리케이션의 'lims' 도메인 패키지입니다.

이 패키지는 PostgreSQL의 'lims' 스키마에 해당하는 데이터 모델과
조회 로직을 포함합니다. 시료(Sample), 시료 단위(SampleUnit),
단위별 분석 결과(UnitResult)를 관리하며, 해석 규칙 엔진('interp' 도메인)이
이 데이터를 읽어 진단 해석을 생성합니다.

주요 서브모듈:
- `models.py`: 'lims' 스키마의 테이블에 매핑되는 SQLModel 정의.
- `crud.py`: 시료를 단위/결과와 함께 읽는 비동기 조회 로직.
"""

# 패키지 메타데이터 (선택 사항)
__title__ = "Phyto LIMS Sample Domain"
__description__ = "Manages samples, sample units and their analytical results."
__version__ = "0.1.0"  # lims 도메인 패키지의 버전
__all__ = []  # 'from app.domains.lims import *' 시 내보낼 이름 목록. 일반적으로 비워둡니다.
