# app/domains/interp/services.py

"""
해석 규칙 엔진의 오케스트레이터(InterpretationService) 모듈입니다.

하나의 평가 패스(pass)는 다음 순서로 진행됩니다.

1. 시료를 단위/결과까지 함께 조회합니다.
2. 활성 규칙 목록을 (캐시를 거쳐) 읽어 컴파일합니다.
3. 시료의 기존 해석을 삭제합니다.
4. 규칙 매처를 실행합니다.
5. 일치한 항목마다 메시지를 렌더링하여 새 해석을 저장합니다.

3~5단계는 하나의 트랜잭션에서 실행되며, 실패하면 롤백되어 이전 해석이 그대로 남습니다.
같은 시료에 대한 패스는 프로세스 내 잠금과 (PostgreSQL의 경우) advisory lock으로 직렬화됩니다.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, AsyncGenerator, Dict, List, Optional

from pydantic import BaseModel, Field as PydanticField
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import RepositoryError
from app.domains.lims import crud as lims_crud

from . import crud as interp_crud
from . import schemas as interp_schemas
from .matcher import CompiledRule, compile_rules, match_rules

logger = logging.getLogger(__name__)


class EvaluationStatus(str, Enum):
    APPLIED = "applied"
    SAMPLE_NOT_FOUND = "sample_not_found"
    REPOSITORY_ERROR = "repository_error"


class EvaluationOutcome(BaseModel):
    """평가 패스의 결과. 실패와 '일치 없음'을 구분하기 위해 상태를 함께 반환합니다."""
    sample_id: int
    status: EvaluationStatus
    interpretations: List[Any] = PydanticField(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == EvaluationStatus.APPLIED


class InterpretationService:
    """
    시료 하나에 대해 해석 규칙을 평가하고 결과를 저장하는 서비스입니다.

    Args:
        samples: get_sample_with_results(db, sample_id)를 제공하는 시료 저장소.
        rules: list_active_rules(db)와 cache 속성을 제공하는 규칙 저장소.
        store: lock_sample, delete_for_sample, insert, list_for_sample을 제공하는 해석 저장소.
    """

    def __init__(self, samples=None, rules=None, store=None):
        self.samples = samples or lims_crud.sample
        self.rules = rules or interp_crud.rule
        self.store = store or interp_crud.applied_interpretation
        # sample_id -> [잠금, 대기/보유 중인 패스 수]
        self._sample_locks: Dict[int, list] = {}

    @asynccontextmanager
    async def _sample_guard(self, sample_id: int) -> AsyncGenerator[None, None]:
        entry = self._sample_locks.get(sample_id)
        if entry is None:
            entry = self._sample_locks[sample_id] = [asyncio.Lock(), 0]
        entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0:
                self._sample_locks.pop(sample_id, None)

    async def _load_rules(self, db: AsyncSession) -> List[CompiledRule]:
        async def loader() -> List[CompiledRule]:
            return compile_rules(await self.rules.list_active_rules(db))

        cache = getattr(self.rules, "cache", None)
        if cache is None:
            return await loader()
        return await cache.get(loader)

    # =========================================================================
    # 평가 패스
    # =========================================================================
    async def evaluate(self, db: AsyncSession, sample_id: int) -> EvaluationOutcome:
        """
        시료 하나에 대해 평가 패스를 실행하고 명시적인 결과 상태를 반환합니다.

        Returns:
            EvaluationOutcome: status 가 applied 이면 interpretations 에 새 해석 목록이 담깁니다.
        """
        logger.info("Evaluating interpretation rules for sample %s", sample_id)
        async with self._sample_guard(sample_id):
            try:
                sample = await self.samples.get_sample_with_results(db, sample_id)
            except RepositoryError as e:
                logger.exception("Failed to load sample %s", sample_id)
                return EvaluationOutcome(sample_id=sample_id, status=EvaluationStatus.REPOSITORY_ERROR, error=str(e))

            if sample is None:
                logger.warning("Sample %s not found; no interpretations applied", sample_id)
                return EvaluationOutcome(sample_id=sample_id, status=EvaluationStatus.SAMPLE_NOT_FOUND)

            try:
                rules = await self._load_rules(db)
            except RepositoryError as e:
                logger.exception("Failed to load interpretation rules for sample %s", sample_id)
                return EvaluationOutcome(sample_id=sample_id, status=EvaluationStatus.REPOSITORY_ERROR, error=str(e))

            try:
                await self.store.lock_sample(db, sample_id)
                await self.store.delete_for_sample(db, sample_id)

                applied = []
                for match in match_rules(sample, rules):
                    message = match.rule.template.render(match.result, match.unit, sample)
                    applied.append(
                        await self.store.insert(
                            db,
                            obj_in=interp_schemas.AppliedInterpretationCreate(
                                sample_id=sample_id,
                                rule_id=match.rule.rule.id,
                                message=message,
                                severity=match.rule.rule.severity,
                            ),
                        )
                    )
                await db.commit()
            except (RepositoryError, SQLAlchemyError) as e:
                await db.rollback()
                logger.exception("Failed to store interpretations for sample %s; changes rolled back", sample_id)
                return EvaluationOutcome(sample_id=sample_id, status=EvaluationStatus.REPOSITORY_ERROR, error=str(e))

        logger.info("Applied %d interpretations to sample %s", len(applied), sample_id)
        return EvaluationOutcome(sample_id=sample_id, status=EvaluationStatus.APPLIED, interpretations=applied)

    async def evaluate_and_apply(self, db: AsyncSession, sample_id: int) -> List[Any]:
        """
        평가 패스를 실행하고 새로 저장된 해석 목록을 반환합니다.
        시료가 없거나 저장소 오류가 발생하면 빈 목록을 반환합니다 (상세 상태는 evaluate 사용).
        """
        outcome = await self.evaluate(db, sample_id)
        return outcome.interpretations

    async def list_applied(self, db: AsyncSession, sample_id: int) -> List[Any]:
        """시료에 저장된 해석 목록을 규칙 정보와 함께 최신순으로 반환합니다."""
        return await self.store.list_for_sample(db, sample_id)


interpretation_service = InterpretationService()
