# app/core/crud_base.py

"""
공통 CRUD(Create, Read, Update, Delete) 작업을 위한 기본 클래스 모듈입니다.
모든 메서드는 비동기(async) 환경에 맞게 작성되었으며,
데이터베이스 오류는 RepositoryError로 감싸서 전달합니다.
"""

import logging
from typing import Generic, List, Optional, Type, TypeVar, Any, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from pydantic import BaseModel

from app.core.exceptions import RepositoryError

ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)

logger = logging.getLogger(__name__)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    모든 CRUD 작업에 대한 기본 클래스를 정의합니다.
    """
    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def get(self, db: AsyncSession, id: Any) -> Optional[ModelType]:
        """ID를 기준으로 단일 레코드를 조회합니다."""
        try:
            return await db.get(self.model, id)
        except SQLAlchemyError as e:
            raise RepositoryError(f"{self.model.__name__}.get", e) from e

    async def get_filtered(
        self,
        db: AsyncSession,
        *,
        filters: Optional[Dict[str, Any]] = None,  # 다중 속성 필터: {"attribute_name": "value"}
        order_by_field: Optional[str] = None,      # 정렬할 필드 (예: "created_at")
        order_desc: bool = True,                   # 내림차순 정렬 여부
        skip: int = 0,
        limit: Optional[int] = 100
    ) -> List[ModelType]:
        """
        다중 속성 필터와 정렬을 지원하는 다중 조회.
        값이 None인 필터는 무시합니다.
        """
        query = select(self.model)
        conditions = []

        for attribute, value in (filters or {}).items():
            if value is None:
                continue
            if not hasattr(self.model, attribute):
                logger.warning("Model %s has no attribute '%s'", self.model.__name__, attribute)
                continue
            conditions.append(getattr(self.model, attribute) == value)

        if conditions:
            query = query.where(*conditions)

        if order_by_field and hasattr(self.model, order_by_field):
            column = getattr(self.model, order_by_field)
            query = query.order_by(column.desc() if order_desc else column)
        elif hasattr(self.model, 'id'):
            query = query.order_by(self.model.id.desc() if order_desc else self.model.id)

        query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)

        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            raise RepositoryError(f"{self.model.__name__}.get_filtered", e) from e
        return list(result.scalars().all())

    async def create(self, db: AsyncSession, *, obj_in: CreateSchemaType, commit: bool = True) -> ModelType:
        """
        새로운 레코드를 생성합니다.
        commit=False 이면 flush만 수행하여 호출자의 트랜잭션에 참여합니다.
        """
        db_obj = self.model.model_validate(obj_in)
        db.add(db_obj)
        try:
            if commit:
                await db.commit()
                await db.refresh(db_obj)
            else:
                await db.flush()
        except SQLAlchemyError as e:
            raise RepositoryError(f"{self.model.__name__}.create", e) from e
        return db_obj

    async def update(
        self, db: AsyncSession, *, db_obj: ModelType, obj_in: UpdateSchemaType | Dict[str, Any]
    ) -> ModelType:
        """기존 레코드를 업데이트합니다."""
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(db_obj, key, value)

        db.add(db_obj)
        try:
            await db.commit()
            await db.refresh(db_obj)
        except SQLAlchemyError as e:
            raise RepositoryError(f"{self.model.__name__}.update", e) from e
        return db_obj
