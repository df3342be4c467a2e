# tests/domains/test_lims_n.py

"""
'lims' 도메인 (시료, 시료 단위, 분석 결과)의 저장소에 대한 통합 테스트 모듈입니다.

- 시료를 단위/결과까지 한 번에 읽어오는지 검증합니다.
- 저장소 오류가 RepositoryError로 감싸지는지 검증합니다.
"""

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import RepositoryError
from app.domains.lims import crud as lims_crud
from app.domains.lims import models as lims_models


@pytest.mark.asyncio
async def test_get_sample_with_results(db_session: AsyncSession, sample_factory):
    created = await sample_factory(
        code="S-0100",
        species="Papa",
        variety="Desiree",
        next_crop="Papa",
        units=[
            {"code": "U1", "label": "Lote 1", "results": [
                {"analyte": "Fusarium", "result_value": 250, "test_area": "fitopatologia"},
                {"analyte": "Botrytis", "result_flag": "positivo", "test_area": "fitopatologia"},
            ]},
            {"code": "U2", "label": "Lote 2", "results": []},
        ],
    )
    db_session.expunge_all()

    sample = await lims_crud.sample.get_sample_with_results(db_session, created.id)

    assert sample is not None
    assert sample.code == "S-0100"
    assert sample.next_crop == "Papa"
    assert [u.code for u in sample.units] == ["U1", "U2"]
    assert [r.analyte for r in sample.units[0].results] == ["Fusarium", "Botrytis"]
    assert sample.units[0].results[0].result_value == 250
    assert sample.units[0].results[1].result_flag == "positivo"
    assert sample.units[1].results == []


@pytest.mark.asyncio
async def test_get_sample_with_results_sees_new_results(db_session: AsyncSession, sample_factory):
    """이미 세션에 로드된 시료도 새로 추가된 결과를 다시 읽어옵니다."""
    created = await sample_factory(units=[{"code": "U1", "label": "U1", "results": []}])
    unit_id = created.units[0].id

    db_session.add(lims_models.UnitResult(unit_id=unit_id, analyte="Meloidogyne", result_value=80, test_area="nematologia"))
    await db_session.commit()

    sample = await lims_crud.sample.get_sample_with_results(db_session, created.id)
    assert [r.analyte for r in sample.units[0].results] == ["Meloidogyne"]


@pytest.mark.asyncio
async def test_get_unknown_sample_returns_none(db_session: AsyncSession):
    assert await lims_crud.sample.get_sample_with_results(db_session, 4040) is None


@pytest.mark.asyncio
async def test_repository_error_is_wrapped():
    class FailingSession:
        async def execute(self, statement):
            raise OperationalError("SELECT", {}, Exception("server closed the connection"))

    with pytest.raises(RepositoryError) as exc_info:
        await lims_crud.sample.get_sample_with_results(FailingSession(), 1)

    assert exc_info.value.operation == "get_sample_with_results"
    assert isinstance(exc_info.value.cause, OperationalError)


def test_result_value_is_double_precision_on_postgresql():
    """정량 결과값은 PostgreSQL에서 배정밀도(float8)로 저장되어야 합니다."""
    column_type = lims_models.UnitResult.__table__.c.result_value.type
    assert column_type.compile(dialect=postgresql.dialect()) == "DOUBLE PRECISION"


@pytest.mark.asyncio
async def test_result_value_keeps_decimal_precision(db_session: AsyncSession, sample_factory):
    created = await sample_factory(units=[
        {"code": "U1", "label": "U1", "results": [{"analyte": "Tylenchulus", "result_value": 2.3}]},
    ])
    db_session.expunge_all()

    sample = await lims_crud.sample.get_sample_with_results(db_session, created.id)

    assert sample.units[0].results[0].result_value == 2.3
