from __future__ import annotations

from fastapi import APIRouter, Depends

from ..schemas import (
    AIEnhancement,
    AIResult,
    AISuggestion,
    AISummary,
    EnhanceRequest,
    RemediationRequest,
    SummarizeRequest,
)
from .deps import get_analyzer

router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/remediation", response_model=AIResult[AISuggestion])
async def suggest_remediation(payload: RemediationRequest, analyzer=Depends(get_analyzer)) -> AIResult[AISuggestion]:
    return await analyzer.suggest_remediation(payload.vulnerability_description, payload.device_information)


@router.post("/enhance", response_model=AIResult[AIEnhancement])
async def enhance_report(payload: EnhanceRequest, analyzer=Depends(get_analyzer)) -> AIResult[AIEnhancement]:
    return await analyzer.enhance_report(payload.scan_report)


@router.post("/summarize", response_model=AIResult[AISummary])
async def summarize_findings(payload: SummarizeRequest, analyzer=Depends(get_analyzer)) -> AIResult[AISummary]:
    return await analyzer.summarize_findings(payload.scan_data)
