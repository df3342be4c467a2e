# app/domains/interp/tasks.py

"""
'interp' 도메인의 ARQ 백그라운드 작업을 정의하는 모듈입니다.
"""

import logging

from app.core.database import get_async_session_context
from .services import interpretation_service

logger = logging.getLogger(__name__)


async def evaluate_sample_interpretations_task(ctx, sample_id: int):
    """
    시료 하나에 대해 해석 규칙 평가 패스를 실행하는 백그라운드 작업.
    API의 `background=true` 요청이나 결과 입력 완료 후 예약됩니다.
    """
    logger.info("백그라운드 작업 시작: 시료 %s 해석 규칙 평가", sample_id)

    async with get_async_session_context() as db:
        outcome = await interpretation_service.evaluate(db, sample_id)

    if not outcome.ok:
        logger.warning("백그라운드 작업 실패: 시료 %s (%s)", sample_id, outcome.status.value)
    else:
        logger.info("작업 완료! 시료 %s 에 %d개의 해석 적용됨.", sample_id, len(outcome.interpretations))

    return {
        "status": outcome.status.value,
        "sample_id": sample_id,
        "count": len(outcome.interpretations),
    }
