"""API routes for Green Field Analysis optimization."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.optimization import AnalysisRequest, AnalysisResponse, OptimizationRequest, OptimizationResponse
from ...services.optimization.service import process_analysis_request, process_optimization_request

router = APIRouter(prefix="/gfa", tags=["gfa"])


@router.post("/optimize", response_model=OptimizationResponse, status_code=status.HTTP_200_OK)
def optimize(payload: OptimizationRequest) -> OptimizationResponse:
    """Run the facility-location optimizer.

    Constraint violations are reported through ``feasible`` and ``warnings``;
    only invalid input is rejected with 400.
    """
    try:
        return process_optimization_request(payload, persist=payload.persist)
    except ConnectionError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Database connection error: {str(exc)}. Please check your internet connection and try again.",
        ) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error running optimization: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to run optimization: {str(exc)}",
        ) from exc


@router.post("/analysis", response_model=AnalysisResponse, status_code=status.HTTP_200_OK)
def analyze(payload: AnalysisRequest) -> AnalysisResponse:
    """Distance, distance-band and profitability breakdown of an optimization result."""
    try:
        return process_analysis_request(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
