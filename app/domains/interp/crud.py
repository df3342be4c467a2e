# app/domains/interp/crud.py

"""
'interp' 도메인 (해석 규칙 엔진)의 CRUD 로직을 담당하는 모듈입니다.

- 규칙 저장소 (CRUDInterpretationRule): 활성 규칙 조회, 생성, 비활성화.
- 해석 결과 저장소 (CRUDAppliedInterpretation): 시료별 삭제/삽입/조회와 시료 단위 잠금.
- 활성 규칙 캐시 (RuleCatalogCache): 규칙 생성/비활성화 시 명시적으로 무효화됩니다.
"""

import logging
import time
from typing import Any, Awaitable, Callable, List, Optional

from sqlalchemy import delete, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.crud_base import CRUDBase
from app.core.exceptions import RepositoryError

from . import models as interp_models
from . import schemas as interp_schemas

logger = logging.getLogger(__name__)

# pg_advisory_xact_lock(key1, key2) 의 첫 번째 키 - 해석 엔진 전용 네임스페이스
ADVISORY_LOCK_NAMESPACE = 0x1A7E


# =============================================================================
# 1. 활성 규칙 캐시
# =============================================================================
class RuleCatalogCache:
    """
    컴파일된 활성 규칙 목록을 TTL 동안 재사용하는 읽기 캐시입니다.
    ttl_seconds 가 0 이면 캐시하지 않고 매번 로더를 호출합니다.
    """

    def __init__(self, ttl_seconds: int = 0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Optional[List[Any]] = None
        self._loaded_at = 0.0

    async def get(self, loader: Callable[[], Awaitable[List[Any]]]) -> List[Any]:
        if self.ttl_seconds <= 0:
            return await loader()

        now = self._clock()
        if self._entries is None or now - self._loaded_at >= self.ttl_seconds:
            self._entries = await loader()
            self._loaded_at = now
            logger.debug("Rule catalogue loaded (%d rules)", len(self._entries))
        return self._entries

    def invalidate(self) -> None:
        self._entries = None


# =============================================================================
# 2. 해석 규칙 (InterpretationRule) CRUD
# =============================================================================
class CRUDInterpretationRule(CRUDBase[interp_models.InterpretationRule, interp_schemas.RuleCreate, interp_schemas.RuleCreate]):
    def __init__(self):
        super().__init__(model=interp_models.InterpretationRule)
        self.cache = RuleCatalogCache(ttl_seconds=settings.INTERP_RULE_CACHE_TTL_SECONDS)

    async def list_active_rules(self, db: AsyncSession) -> List[interp_models.InterpretationRule]:
        """활성 규칙을 생성 순서(ID 오름차순)로 조회합니다."""
        return await self.get_filtered(db, filters={"active": True}, order_desc=False, limit=None)

    async def list_rules(
        self, db: AsyncSession, *, area: Optional[str] = None, active: Optional[bool] = None
    ) -> List[interp_models.InterpretationRule]:
        """분야/활성 여부로 필터링한 규칙 목록을 최신순으로 조회합니다."""
        return await self.get_filtered(db, filters={"area": area, "active": active}, limit=None)

    async def create_rule(
        self, db: AsyncSession, *, obj_in: interp_schemas.RuleCreate
    ) -> interp_models.InterpretationRule:
        db_obj = await self.create(db, obj_in=obj_in.model_dump())
        self.cache.invalidate()
        logger.info("Interpretation rule %s created (area=%s, analyte=%s)", db_obj.id, db_obj.area, db_obj.analyte)
        return db_obj

    async def deactivate_rule(self, db: AsyncSession, *, rule_id: int) -> bool:
        """규칙을 비활성화(Soft Delete)합니다. 규칙이 없으면 False를 반환합니다."""
        db_obj = await self.get(db, id=rule_id)
        if db_obj is None:
            return False
        await self.update(db, db_obj=db_obj, obj_in={"active": False})
        self.cache.invalidate()
        logger.info("Interpretation rule %s deactivated", rule_id)
        return True


# =============================================================================
# 3. 적용된 해석 (AppliedInterpretation) CRUD
# =============================================================================
class CRUDAppliedInterpretation(CRUDBase[interp_models.AppliedInterpretation, interp_schemas.AppliedInterpretationCreate, interp_schemas.AppliedInterpretationCreate]):
    def __init__(self):
        super().__init__(model=interp_models.AppliedInterpretation)

    async def lock_sample(self, db: AsyncSession, sample_id: int) -> None:
        """
        현재 트랜잭션이 끝날 때까지 시료 단위 잠금을 잡습니다 (PostgreSQL 전용).
        다른 데이터베이스에서는 아무 작업도 하지 않습니다.
        """
        if db.get_bind().dialect.name != "postgresql":
            return
        try:
            await db.execute(
                text("SELECT pg_advisory_xact_lock(:namespace, :sample_id)"),
                {"namespace": ADVISORY_LOCK_NAMESPACE, "sample_id": sample_id},
            )
        except SQLAlchemyError as e:
            raise RepositoryError("lock_sample", e) from e

    async def delete_for_sample(self, db: AsyncSession, sample_id: int) -> int:
        """시료의 기존 해석을 모두 삭제합니다. 커밋은 호출자가 수행합니다."""
        statement = delete(self.model).where(self.model.sample_id == sample_id)
        try:
            result = await db.execute(statement)
        except SQLAlchemyError as e:
            raise RepositoryError("delete_for_sample", e) from e
        return result.rowcount or 0

    async def insert(
        self, db: AsyncSession, *, obj_in: interp_schemas.AppliedInterpretationCreate
    ) -> interp_models.AppliedInterpretation:
        """해석 한 건을 추가합니다 (flush만 수행, 커밋은 호출자가 수행)."""
        return await self.create(db, obj_in=obj_in.model_dump(), commit=False)

    async def list_for_sample(self, db: AsyncSession, sample_id: int) -> List[interp_models.AppliedInterpretation]:
        """시료의 해석 목록을 규칙 정보와 함께 최신순으로 조회합니다."""
        statement = (
            select(self.model)
            .where(self.model.sample_id == sample_id)
            .options(selectinload(self.model.rule))
            .order_by(self.model.created_at.desc(), self.model.id.desc())
        )
        try:
            result = await db.execute(statement)
        except SQLAlchemyError as e:
            raise RepositoryError("list_for_sample", e) from e
        return list(result.scalars().all())


rule = CRUDInterpretationRule()
applied_interpretation = CRUDAppliedInterpretation()
