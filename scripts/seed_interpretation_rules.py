# scripts/seed_interpretation_rules.py

"""
예시 해석 규칙을 데이터베이스에 등록하는 스크립트입니다.

사용법:
    python -m scripts.seed_interpretation_rules            # 규칙 추가
    python -m scripts.seed_interpretation_rules --clear    # 기존 규칙/해석 삭제 후 추가
"""

import asyncio
import logging
from collections import Counter
from typing import Dict, List, Tuple

import typer
from pydantic import ValidationError
from sqlalchemy import delete
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import engine
from app.core.exceptions import RepositoryError
from app.domains.interp import crud as interp_crud
from app.domains.interp import models as interp_models
from app.domains.interp import schemas as interp_schemas


cli = typer.Typer()

AREAS = ["nematologia", "virologia", "fitopatologia", "deteccion_precoz"]

# =============================================================================
# 예시 규칙 목록 (분야별)
# =============================================================================
NEMATOLOGY_RULES = [
    {
        "area": "nematologia", "analyte": "Meloidogyne", "comparator": ">", "threshold": {"value": 100},
        "message": "Alta población de nematodos del nudo (Meloidogyne spp.) detectada: {value} individuos en {unit_label}. "
                   "Se recomienda implementar rotación de cultivos con plantas no hospederas y considerar tratamiento nematicida.",
        "severity": "high",
    },
    {
        "area": "nematologia", "analyte": "Meloidogyne", "comparator": ">=", "threshold": {"value": 50},
        "message": "Población moderada de Meloidogyne spp. detectada: {value} individuos en {unit_label}. "
                   "Monitorear desarrollo del cultivo y considerar medidas preventivas.",
        "severity": "moderate",
    },
    {
        "area": "nematologia", "analyte": "Heterodera", "comparator": ">", "threshold": {"value": 30},
        "message": "Presencia significativa de nematodos quiste (Heterodera spp.): {value} quistes/100g de suelo en {unit_label}. "
                   "Puede afectar significativamente el rendimiento.",
        "severity": "high",
    },
    {
        "area": "nematologia", "analyte": "Pratylenchus", "comparator": ">", "threshold": {"value": 200},
        "message": "Alta densidad de nematodos lesionadores (Pratylenchus spp.): {value} individuos en {unit_label}. "
                   "Riesgo de daño radicular severo.",
        "severity": "high",
    },
    {
        "area": "nematologia", "analyte": "Tylenchulus", "comparator": ">=", "threshold": {"value": 100},
        "message": "Población de nematodos de los cítricos (Tylenchulus semipenetrans) detectada: {value} individuos en {unit_label}. "
                   "Monitorear salud radicular.",
        "severity": "moderate",
    },
]

VIROLOGY_RULES = [
    {
        "area": "virologia", "analyte": "PNRSV", "comparator": "=", "threshold": {"flag": "positivo"},
        "message": "Detección POSITIVA de Virus del Anillado Necrótico de los Frutales de Carozo (PNRSV) en {unit_label}. "
                   "IMPLEMENTAR INMEDIATAMENTE medidas de cuarentena y evitar propagación vegetativa.",
        "severity": "high",
    },
    {
        "area": "virologia", "analyte": "ApMV", "comparator": "=", "threshold": {"flag": "positivo"},
        "message": "Detección POSITIVA de Virus del Mosaico del Manzano (ApMV) en {unit_label}. "
                   "Eliminar material infectado y desinfectar herramientas.",
        "severity": "high",
    },
    {
        "area": "virologia", "analyte": "ACLSV", "comparator": "=", "threshold": {"flag": "positivo"},
        "message": "Detección POSITIVA de Virus de la Hoja Clorótica del Manzano (ACLSV) en {unit_label}. "
                   "Evaluar sintomatología y considerar eliminación de plantas afectadas.",
        "severity": "moderate",
    },
    {
        "area": "virologia", "analyte": "PDV", "comparator": "=", "threshold": {"flag": "positivo"},
        "message": "Detección POSITIVA de Virus de la Decadencia del Peral (PDV) en {unit_label}. "
                   "Implementar medidas de control vectorial y sanitización.",
        "severity": "high",
    },
]

PHYTOPATHOLOGY_RULES = [
    {
        "area": "fitopatologia", "analyte": "Fusarium", "comparator": ">", "threshold": {"value": 1000},
        "message": "Alta carga fúngica de Fusarium spp. detectada: {value} UFC/g en {unit_label}. "
                   "ALTO RIESGO de marchitez vascular. Implementar drenaje y evitar exceso de humedad.",
        "severity": "high",
    },
    {
        "area": "fitopatologia", "analyte": "Fusarium", "comparator": ">=", "threshold": {"value": 500},
        "message": "Presencia moderada de Fusarium spp.: {value} UFC/g en {unit_label}. "
                   "Monitorear síntomas de marchitez y aplicar medidas preventivas.",
        "severity": "moderate",
    },
    {
        "area": "fitopatologia", "analyte": "Botrytis", "comparator": "=", "threshold": {"flag": "positivo"},
        "message": "Presencia de Botrytis cinerea confirmada en {unit_label}. "
                   "Mejorar ventilación, reducir humedad relativa y considerar aplicación fungicida preventiva.",
        "severity": "moderate",
    },
    {
        "area": "fitopatologia", "analyte": "Pythium", "comparator": ">", "threshold": {"value": 100},
        "message": "Alta concentración de Pythium spp.: {value} UFC/g en {unit_label}. "
                   "Riesgo de pudrición radicular. Mejorar drenaje urgentemente.",
        "severity": "high",
    },
    {
        "area": "fitopatologia", "analyte": "Rhizoctonia", "comparator": ">=", "threshold": {"value": 50},
        "message": "Presencia de Rhizoctonia solani detectada: {value} UFC/g en {unit_label}. "
                   "Riesgo de damping-off en plántulas. Usar sustratos estériles.",
        "severity": "moderate",
    },
    {
        "area": "fitopatologia", "analyte": "Sclerotinia", "comparator": "=", "threshold": {"flag": "positivo"},
        "message": "Sclerotinia sclerotiorum detectada en {unit_label}. "
                   "Eliminar restos vegetales infectados y mejorar circulación de aire.",
        "severity": "moderate",
    },
]

EARLY_DETECTION_RULES = [
    {
        "area": "deteccion_precoz", "analyte": "Botrytis", "comparator": "=", "threshold": {"flag": "positivo"},
        "message": "DETECCIÓN PRECOZ: Botrytis cinerea detectada en {unit_label}. "
                   "Intervenir INMEDIATAMENTE antes de la aparición de síntomas visibles.",
        "severity": "high",
    },
    {
        "area": "deteccion_precoz", "analyte": "Alternaria", "comparator": "=", "threshold": {"flag": "positivo"},
        "message": "DETECCIÓN PRECOZ: Alternaria spp. identificada en {unit_label}. "
                   "Aplicar fungicida preventivo y monitorear condiciones climáticas.",
        "severity": "moderate",
    },
]

# 작물별 규칙
CROP_SPECIFIC_RULES = [
    {
        "area": "nematologia", "species": "Tomate", "analyte": "Meloidogyne", "comparator": ">",
        "threshold": {"value": 50},
        "message": "En TOMATE: Población crítica de Meloidogyne spp. ({value} individuos). "
                   "En este cultivo susceptible, implementar inmediatamente solarización del suelo o biofumigación.",
        "severity": "high",
    },
    {
        "area": "fitopatologia", "species": "Papa", "crop_next": "Papa", "analyte": "Fusarium", "comparator": ">",
        "threshold": {"value": 200},
        "message": "CRÍTICO para rotación PAPA-PAPA: Alta carga de Fusarium ({value} UFC/g). "
                   "Cambiar plan de rotación, evitar papa por al menos 3 años.",
        "severity": "high",
    },
]

SEED_RULES: List[Dict] = (
    NEMATOLOGY_RULES + VIROLOGY_RULES + PHYTOPATHOLOGY_RULES + EARLY_DETECTION_RULES + CROP_SPECIFIC_RULES
)


async def clear_rules(db: AsyncSession) -> None:
    """기존 해석 결과와 규칙을 모두 삭제합니다 (해석이 규칙을 참조하므로 해석을 먼저 삭제)."""
    await db.execute(delete(interp_models.AppliedInterpretation))
    await db.execute(delete(interp_models.InterpretationRule))
    await db.commit()
    interp_crud.rule.cache.invalidate()


async def seed_rules(db: AsyncSession, clear: bool = False) -> Tuple[int, int]:
    """
    예시 규칙을 등록하고 (생성 수, 오류 수)를 반환합니다.
    규칙 하나가 실패해도 나머지 규칙은 계속 등록합니다.
    """
    if clear:
        print("기존 해석 규칙을 삭제합니다...")
        await clear_rules(db)

    created = 0
    errors = 0
    for raw_rule in SEED_RULES:
        try:
            rule_in = interp_schemas.RuleCreate(**raw_rule)
            await interp_crud.rule.create_rule(db, obj_in=rule_in)
            created += 1
        except (ValidationError, RepositoryError) as e:
            await db.rollback()
            print(f"오류: '{raw_rule['analyte']}' 규칙 생성 실패: {e}")
            errors += 1
    return created, errors


async def summarize_rules(db: AsyncSession) -> Dict[str, Dict]:
    """분야별 활성 규칙 수, 심각도 분포, 분석 대상 목록을 집계합니다."""
    summary = {}
    for area in AREAS:
        rules = await interp_crud.rule.list_rules(db, area=area, active=True)
        severities = Counter(str(getattr(r.severity, "value", r.severity)) for r in rules)
        summary[area] = {
            "count": len(rules),
            "severity": {level: severities.get(level, 0) for level in ("high", "moderate", "low")},
            "analytes": sorted({r.analyte for r in rules}),
        }
    return summary


@cli.command()
def main(
    clear: bool = typer.Option(
        False, '--clear', '-c',
        help="기존 규칙과 적용된 해석을 모두 삭제한 뒤 등록합니다."
    ),
):
    """
    Phyto LIMS 해석 규칙 엔진을 위한 예시 규칙을 등록합니다.
    """
    logging.basicConfig(level=logging.INFO)
    print(f"{len(SEED_RULES)}개의 해석 규칙 등록을 시작합니다...")

    AsyncSessionLocal = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async def run_seed():
        async with AsyncSessionLocal() as db:
            created, errors = await seed_rules(db, clear=clear)
            print(f"{created}개의 해석 규칙이 생성되었습니다.")
            if errors:
                print(f"{errors}개의 오류가 발생했습니다.")

            print("\n분야별 규칙:")
            for area, info in (await summarize_rules(db)).items():
                severity = info["severity"]
                print(f"\n{area.upper()}: {info['count']} rules")
                print(f"   High: {severity['high']}, Moderate: {severity['moderate']}, Low: {severity['low']}")
                print(f"   Analytes: {', '.join(info['analytes'])}")
        await engine.dispose()
        return errors

    errors = asyncio.run(run_seed())
    if errors:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    cli()
