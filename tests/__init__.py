# tests/__init__.py

"""
Phyto LIMS API의 테스트 스위트 패키지입니다.

- `conftest.py`: 인메모리 SQLite 엔진, 테스트 세션, AsyncClient, 시료/규칙 팩토리 픽스처.
- `test_main.py`: 루트/헬스 체크 엔드포인트와 ARQ 워커 설정.
- `domains/`: 도메인별('lims', 'interp') 테스트 모듈.
"""

__title__ = "Phyto LIMS API Tests"
__version__ = "0.1.0"  # 테스트 스위트의 내부 버전
__all__ = []
