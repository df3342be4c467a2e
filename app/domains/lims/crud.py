# app/domains/lims/crud.py

"""
'lims' 도메인의 조회 로직(시료 저장소)을 담당하는 모듈입니다.
해석 규칙 엔진이 시료와 하위 단위/결과를 한 번의 호출로 읽어갈 수 있도록 합니다.
"""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import RepositoryError

from . import models as lims_models


# =============================================================================
# 1. 시료 (Sample) 저장소
# =============================================================================
class CRUDSample:
    def __init__(self):
        self.model = lims_models.Sample

    async def get_sample_with_results(self, db: AsyncSession, sample_id: int) -> Optional[lims_models.Sample]:
        """
        시료를 단위(units)와 단위별 결과(results)까지 즉시 로딩(selectinload)하여 조회합니다.
        존재하지 않으면 None을 반환합니다.
        """
        statement = (
            select(self.model)
            .where(self.model.id == sample_id)
            .execution_options(populate_existing=True)
            .options(
                selectinload(self.model.units).selectinload(lims_models.SampleUnit.results)
            )
        )
        try:
            result = await db.execute(statement)
        except SQLAlchemyError as e:
            raise RepositoryError("get_sample_with_results", e) from e
        return result.scalars().one_or_none()


sample = CRUDSample()
