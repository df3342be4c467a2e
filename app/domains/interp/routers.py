# app/domains/interp/routers.py

"""
'interp' 도메인 (해석 규칙 엔진) 관련 API 엔드포인트를 정의하는 모듈입니다.

- 시료 평가 실행 (동기 실행 또는 ARQ 백그라운드 작업 예약)
- 해석 규칙 조회/생성/비활성화
- 시료별 적용된 해석 조회
"""
from typing import List, Optional, Union
from sqlmodel.ext.asyncio.session import AsyncSession
from fastapi import APIRouter, Depends, HTTPException, status, Request, Response

# 중앙 의존성 관리 모듈 임포트
from app.core import dependencies as deps
from app.core.exceptions import RepositoryError

# 도메인 관련 모듈 임포트
from . import crud as interp_crud
from . import schemas as interp_schemas
from .services import EvaluationStatus, InterpretationService

router = APIRouter(
    tags=["Interpretation Rules (해석 규칙 엔진)"],  # Swagger UI에 표시될 태그
    responses={404: {"description": "Not found"}},  # 이 라우터의 공통 응답 정의
)


# =============================================================================
# 1. 평가 실행 라우터
# =============================================================================
@router.post(
    "/evaluate",
    response_model=Union[interp_schemas.EvaluationResponse, interp_schemas.EvaluationQueuedResponse],
    summary="시료에 해석 규칙 평가 실행"
)
async def evaluate_sample(
    request: Request,
    response: Response,
    evaluate_in: interp_schemas.EvaluateRequest,
    db: AsyncSession = Depends(deps.get_db_session),
    service: InterpretationService = Depends(deps.get_interpretation_service),
):
    """
    시료 하나에 대해 활성 해석 규칙을 평가하고, 기존 해석을 새 결과로 교체합니다.
    `background=true` 이면 ARQ 작업으로 예약하고 202를 반환합니다.
    """
    if evaluate_in.background:
        task_queue_client = request.app.state.redis
        job = await task_queue_client.enqueue_job(
            "evaluate_sample_interpretations_task",
            evaluate_in.sample_id,
        )
        response.status_code = status.HTTP_202_ACCEPTED
        return interp_schemas.EvaluationQueuedResponse(
            message="Interpretation evaluation queued",
            sample_id=evaluate_in.sample_id,
            job_id=getattr(job, "job_id", None),
        )

    outcome = await service.evaluate(db, evaluate_in.sample_id)
    if outcome.status == EvaluationStatus.SAMPLE_NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sample not found")
    if outcome.status == EvaluationStatus.REPOSITORY_ERROR:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Interpretation rules could not be evaluated"
        )

    return interp_schemas.EvaluationResponse(
        message="Interpretation rules evaluated successfully",
        applied_interpretations=[
            interp_schemas.AppliedInterpretationResponse.model_validate(item) for item in outcome.interpretations
        ],
        count=len(outcome.interpretations),
    )


# =============================================================================
# 2. 해석 규칙 (InterpretationRule) 라우터
# =============================================================================
@router.get("/rules", response_model=List[interp_schemas.RuleResponse], summary="해석 규칙 목록 조회")
async def read_rules(
    area: Optional[str] = None,
    active: Optional[bool] = None,
    db: AsyncSession = Depends(deps.get_db_session),
):
    """분야(area)와 활성 여부(active)로 필터링한 규칙 목록을 최신순으로 조회합니다."""
    try:
        return await interp_crud.rule.list_rules(db, area=area, active=active)
    except RepositoryError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


@router.post("/rules", response_model=interp_schemas.RuleResponse, status_code=status.HTTP_201_CREATED, summary="새 해석 규칙 생성")
async def create_rule(
    rule_in: interp_schemas.RuleCreate,
    db: AsyncSession = Depends(deps.get_db_session),
):
    """새로운 해석 규칙을 생성합니다. 임계값은 비교 연산자에 맞아야 합니다."""
    try:
        return await interp_crud.rule.create_rule(db, obj_in=rule_in)
    except RepositoryError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


@router.get("/rules/{rule_id}", response_model=interp_schemas.RuleResponse, summary="특정 해석 규칙 조회")
async def read_rule(
    rule_id: int, db: AsyncSession = Depends(deps.get_db_session)
):
    try:
        db_obj = await interp_crud.rule.get(db, id=rule_id)
    except RepositoryError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    if not db_obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Interpretation rule not found")
    return db_obj


@router.delete(
    "/rules/{rule_id}",
    status_code=status.HTTP_200_OK,
    summary="해석 규칙 비활성화 (Soft Delete)"
)
async def delete_rule(
    rule_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
):
    """ID를 기준으로 해석 규칙을 비활성화(Soft Delete)합니다."""
    try:
        deactivated = await interp_crud.rule.deactivate_rule(db, rule_id=rule_id)
    except RepositoryError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    if not deactivated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Interpretation rule not found")
    return {"message": "Interpretation rule deactivated", "id": rule_id}


# =============================================================================
# 3. 적용된 해석 (AppliedInterpretation) 라우터
# =============================================================================
@router.get(
    "/samples/{sample_id}/interpretations",
    response_model=List[interp_schemas.AppliedInterpretationDetailResponse],
    summary="시료에 적용된 해석 조회"
)
async def read_sample_interpretations(
    sample_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    service: InterpretationService = Depends(deps.get_interpretation_service),
):
    """시료에 저장된 해석 목록을 적용된 규칙 정보와 함께 최신순으로 조회합니다."""
    try:
        return await service.list_applied(db, sample_id)
    except RepositoryError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
