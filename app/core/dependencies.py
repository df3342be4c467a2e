# app/core/dependencies.py

"""
FastAPI 애플리케이션의 의존성 주입(Dependency Injection)을 정의하는 모듈입니다.

- 데이터베이스 세션 관리 (get_db_session).
- 해석 규칙 엔진 서비스 제공 (get_interpretation_service).

인증/인가는 상위 게이트웨이에서 처리하므로 이 모듈에서는 다루지 않습니다.
"""

from typing import AsyncGenerator
from sqlmodel.ext.asyncio.session import AsyncSession

# 실제 데이터베이스 세션 제너레이터 임포트
from app.core.database import get_session as get_main_app_session
from app.domains.interp.services import InterpretationService, interpretation_service


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 의존성 주입을 위한 비동기 데이터베이스 세션 제너레이터입니다.
    app.core.database.get_session을 래핑하여 사용합니다.
    """
    async for session in get_main_app_session():
        yield session


def get_interpretation_service() -> InterpretationService:
    """애플리케이션 전역 해석 서비스 인스턴스를 반환합니다 (테스트에서 오버라이드 가능)."""
    return interpretation_service
