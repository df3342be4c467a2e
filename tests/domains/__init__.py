# tests/domains/__init__.py

"""
도메인별 테스트 모듈 패키지입니다.

- `test_lims_n.py`: 시료 저장소 (단위/결과 즉시 로딩).
- `test_interp_engine_n.py`: 조건 평가기, 메시지 렌더러, 규칙 매처 단위 테스트.
- `test_interp_service_n.py`: 해석 오케스트레이터 시나리오와 실패/롤백/캐시.
- `test_interp_n.py`: 'interp' API 엔드포인트, 저장소, 백그라운드 작업, 예시 규칙 스크립트.
"""

__title__ = "Phyto LIMS Domain Tests"
__version__ = "0.1.0"  # 도메인 테스트 패키지의 내부 버전
__all__ = []
