"""Financing comparison API routes."""
import logging
from typing import List

from fastapi import APIRouter, HTTPException

from domain.financial.services import (
    EvaluateScenarioRequest,
    FinancingComparisonRequest,
    FinancingComparisonResponse,
    ProductionStatsRequest,
    ProductionStatsResponse,
    ScenarioPayload,
    ScenarioResultPayload,
    default_scenario_payloads,
    run_financing_comparison,
    run_production_stats,
    run_scenario_evaluation,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["financial"])


@router.get("/scenarios/defaults", response_model=List[ScenarioPayload])
async def get_default_scenarios() -> List[ScenarioPayload]:
    return default_scenario_payloads()


@router.post("/production-stats", response_model=ProductionStatsResponse)
async def calculate_production_stats(request: ProductionStatsRequest) -> ProductionStatsResponse:
    try:
        return run_production_stats(request)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Production statistics failed")
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.post("/scenarios/evaluate", response_model=ScenarioResultPayload)
async def evaluate_scenario(request: EvaluateScenarioRequest) -> ScenarioResultPayload:
    try:
        return run_scenario_evaluation(request)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Scenario evaluation failed")
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.post("/financing-comparison", response_model=FinancingComparisonResponse)
async def calculate_financing_comparison(request: FinancingComparisonRequest) -> FinancingComparisonResponse:
    try:
        return run_financing_comparison(request)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Financing comparison failed")
        raise HTTPException(status_code=500, detail=str(exc)) from exc
