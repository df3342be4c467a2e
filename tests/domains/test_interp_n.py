# tests/domains/test_interp_n.py

"""
'interp' 도메인 (해석 규칙 엔진) 관련 API 엔드포인트와 저장소, 백그라운드 작업에 대한 통합 테스트 모듈입니다.

- 평가 실행 API (동기 실행, 백그라운드 예약, 404/503 오류 변환).
- 해석 규칙 CRUD API (생성 시 임계값 검증, 목록 필터, 비활성화).
- 시료별 해석 조회 API.
- ARQ 백그라운드 작업과 예시 규칙 등록 스크립트.
"""

from contextlib import asynccontextmanager
from types import SimpleNamespace

import pytest
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core import dependencies as deps
from app.core.exceptions import RepositoryError
from app.domains.interp import crud as interp_crud
from app.domains.interp import tasks as interp_tasks
from app.domains.interp.services import EvaluationOutcome, EvaluationStatus
from app.main import app as main_app

from scripts import seed_interpretation_rules as seed_script

API = "/api/v1/interp"

NEMATODE_UNIT = {
    "code": "U1", "label": "Lote 1",
    "results": [{"analyte": "Meloidogyne", "result_value": 120, "test_area": "nematologia"}],
}

RULE_PAYLOAD = {
    "area": "nematologia",
    "analyte": "Meloidogyne",
    "comparator": ">",
    "threshold": {"value": 100},
    "message": "{analyte} detected at {value} in {unit_label}",
    "severity": "high",
}


# =============================================================================
# 1. 평가 실행 API
# =============================================================================
@pytest.mark.asyncio
async def test_evaluate_sample(client: AsyncClient, sample_factory, rule_factory):
    sample = await sample_factory(units=[NEMATODE_UNIT])
    rule = await rule_factory(message="{analyte} detected at {value} in {unit_label}")

    response = await client.post(f"{API}/evaluate", json={"sample_id": sample.id})

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["message"] == "Interpretation rules evaluated successfully"
    assert body["count"] == 1
    assert body["applied_interpretations"][0]["message"] == "Meloidogyne detected at 120 in Lote 1"
    assert body["applied_interpretations"][0]["rule_id"] == rule.id
    assert body["applied_interpretations"][0]["severity"] == "high"


@pytest.mark.asyncio
async def test_evaluate_sample_without_matches(client: AsyncClient, sample_factory):
    sample = await sample_factory(units=[NEMATODE_UNIT])

    response = await client.post(f"{API}/evaluate", json={"sample_id": sample.id})

    assert response.status_code == 200
    assert response.json()["count"] == 0
    assert response.json()["applied_interpretations"] == []


@pytest.mark.asyncio
async def test_evaluate_unknown_sample_returns_404(client: AsyncClient):
    response = await client.post(f"{API}/evaluate", json={"sample_id": 9999})
    assert response.status_code == 404
    assert response.json()["detail"] == "Sample not found"


@pytest.mark.asyncio
async def test_evaluate_requires_sample_id(client: AsyncClient):
    response = await client.post(f"{API}/evaluate", json={})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_evaluate_repository_error_returns_503(client: AsyncClient):
    class BrokenService:
        async def evaluate(self, db, sample_id):
            return EvaluationOutcome(
                sample_id=sample_id, status=EvaluationStatus.REPOSITORY_ERROR, error="connection refused"
            )

    main_app.dependency_overrides[deps.get_interpretation_service] = lambda: BrokenService()

    response = await client.post(f"{API}/evaluate", json={"sample_id": 1})

    assert response.status_code == 503


@pytest.mark.asyncio
async def test_evaluate_in_background_enqueues_job(client: AsyncClient):
    class FakeRedis:
        def __init__(self):
            self.jobs = []

        async def enqueue_job(self, name, *args):
            self.jobs.append((name, args))
            return SimpleNamespace(job_id="job-1")

    fake_redis = FakeRedis()
    main_app.state.redis = fake_redis
    try:
        response = await client.post(f"{API}/evaluate", json={"sample_id": 7, "background": True})
    finally:
        del main_app.state.redis

    assert response.status_code == 202
    assert response.json() == {"message": "Interpretation evaluation queued", "sample_id": 7, "job_id": "job-1"}
    assert fake_redis.jobs == [("evaluate_sample_interpretations_task", (7,))]


# =============================================================================
# 2. 해석 규칙 API
# =============================================================================
@pytest.mark.asyncio
async def test_create_and_read_rule(client: AsyncClient):
    response = await client.post(f"{API}/rules", json=RULE_PAYLOAD)
    assert response.status_code == 201, response.text
    created = response.json()
    assert created["active"] is True
    assert created["threshold"] == {"value": 100}
    assert created["comparator"] == ">"

    response = await client.get(f"{API}/rules/{created['id']}")
    assert response.status_code == 200
    assert response.json()["analyte"] == "Meloidogyne"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"threshold": {"flag": "positivo"}},
        {"comparator": "in", "threshold": {"values": []}},
        {"comparator": "<"},
        {"severity": "critical"},
        {"area": ""},
        {"message": ""},
    ],
)
async def test_create_rule_validation(client: AsyncClient, overrides):
    """비교 연산자와 맞지 않는 임계값이나 필수 값 누락은 422로 거부됩니다."""
    response = await client.post(f"{API}/rules", json={**RULE_PAYLOAD, **overrides})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_rules_filters(client: AsyncClient, rule_factory):
    first = await rule_factory(area="nematologia")
    second = await rule_factory(area="virologia", analyte="PNRSV", comparator="=", threshold={"flag": "positivo"})
    await rule_factory(area="nematologia", active=False)

    response = await client.get(f"{API}/rules")
    assert response.status_code == 200
    assert len(response.json()) == 3
    # 최신순 정렬
    assert response.json()[-1]["id"] == first.id

    response = await client.get(f"{API}/rules", params={"area": "virologia"})
    assert [r["id"] for r in response.json()] == [second.id]

    response = await client.get(f"{API}/rules", params={"area": "nematologia", "active": True})
    assert [r["id"] for r in response.json()] == [first.id]


@pytest.mark.asyncio
async def test_deactivate_rule(client: AsyncClient, rule_factory):
    rule = await rule_factory()

    response = await client.delete(f"{API}/rules/{rule.id}")
    assert response.status_code == 200
    assert response.json() == {"message": "Interpretation rule deactivated", "id": rule.id}

    response = await client.get(f"{API}/rules/{rule.id}")
    assert response.json()["active"] is False


@pytest.mark.asyncio
async def test_unknown_rule_returns_404(client: AsyncClient):
    assert (await client.get(f"{API}/rules/9999")).status_code == 404
    assert (await client.delete(f"{API}/rules/9999")).status_code == 404


@pytest.mark.asyncio
async def test_rule_endpoints_map_repository_error_to_503(client: AsyncClient, monkeypatch):
    async def failing_get(db, id):
        raise RepositoryError("InterpretationRule.get")

    monkeypatch.setattr(interp_crud.rule, "get", failing_get)

    assert (await client.get(f"{API}/rules/1")).status_code == 503
    assert (await client.delete(f"{API}/rules/1")).status_code == 503


# =============================================================================
# 3. 시료별 해석 조회 API
# =============================================================================
@pytest.mark.asyncio
async def test_read_sample_interpretations(client: AsyncClient, sample_factory, rule_factory):
    sample = await sample_factory(units=[NEMATODE_UNIT])
    rule = await rule_factory()
    await client.post(f"{API}/evaluate", json={"sample_id": sample.id})

    response = await client.get(f"{API}/samples/{sample.id}/interpretations")

    assert response.status_code == 200
    items = response.json()
    assert len(items) == 1
    assert items[0]["message"] == "Meloidogyne: 120"
    assert items[0]["rule"]["id"] == rule.id
    assert items[0]["rule"]["threshold"] == {"value": 100}


@pytest.mark.asyncio
async def test_read_interpretations_for_sample_without_any(client: AsyncClient):
    response = await client.get(f"{API}/samples/12345/interpretations")
    assert response.status_code == 200
    assert response.json() == []


# =============================================================================
# 4. 저장소 (CRUD)
# =============================================================================
@pytest.mark.asyncio
async def test_list_active_rules_in_creation_order(db_session: AsyncSession, rule_factory):
    first = await rule_factory()
    await rule_factory(active=False)
    third = await rule_factory(analyte="Heterodera")

    rules = await interp_crud.rule.list_active_rules(db_session)

    assert [r.id for r in rules] == [first.id, third.id]


@pytest.mark.asyncio
async def test_deactivate_unknown_rule(db_session: AsyncSession):
    assert await interp_crud.rule.deactivate_rule(db_session, rule_id=424242) is False


@pytest.mark.asyncio
async def test_lock_sample_is_noop_outside_postgresql(db_session: AsyncSession):
    await interp_crud.applied_interpretation.lock_sample(db_session, 1)


# =============================================================================
# 5. 백그라운드 작업 및 예시 규칙 스크립트
# =============================================================================
@pytest.mark.asyncio
async def test_evaluate_sample_interpretations_task(db_session: AsyncSession, sample_factory, rule_factory, monkeypatch):
    sample = await sample_factory(units=[NEMATODE_UNIT])
    await rule_factory()

    @asynccontextmanager
    async def session_context():
        yield db_session

    monkeypatch.setattr(interp_tasks, "get_async_session_context", session_context)

    result = await interp_tasks.evaluate_sample_interpretations_task({}, sample.id)
    assert result == {"status": "applied", "sample_id": sample.id, "count": 1}

    result = await interp_tasks.evaluate_sample_interpretations_task({}, 9999)
    assert result == {"status": "sample_not_found", "sample_id": 9999, "count": 0}


@pytest.mark.asyncio
async def test_seed_rules_script(db_session: AsyncSession, sample_factory):
    created, errors = await seed_script.seed_rules(db_session)
    assert errors == 0
    assert created == len(seed_script.SEED_RULES)

    summary = await seed_script.summarize_rules(db_session)
    assert summary["nematologia"]["count"] == 6
    assert summary["virologia"]["severity"] == {"high": 3, "moderate": 1, "low": 0}
    assert "Botrytis" in summary["deteccion_precoz"]["analytes"]

    # 예시 규칙으로 토마토 시료를 평가하면 일반/작물별 Meloidogyne 규칙이 모두 적용됩니다.
    sample = await sample_factory(species="Tomate", units=[NEMATODE_UNIT])
    applied = await interp_tasks.interpretation_service.evaluate_and_apply(db_session, sample.id)
    assert len(applied) == 3

    created, errors = await seed_script.seed_rules(db_session, clear=True)
    assert created == len(seed_script.SEED_RULES)
    assert len(await interp_crud.rule.list_rules(db_session)) == len(seed_script.SEED_RULES)
