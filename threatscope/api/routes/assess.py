"""
Assessment Routes — POST /assess/{transaction,contract,social} and POST /decode

Thin boundary over the assessment engines. Request bodies are validated by
the engine itself so HTTP callers and in-process callers see the same
InvalidInput errors (mapped to 422 in main.py).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, Field

from threatscope.api.dependencies import (
    get_audit_logger,
    get_contract_engine,
    get_social_engine,
    get_transaction_engine,
)
from threatscope.audit.logger import AuditLogger
from threatscope.core.calldata import METHOD_TABLE, decode_calldata
from threatscope.core.engine import AssessmentEngine
from threatscope.core.errors import InvalidInput
from threatscope.models.verdict_models import AuditEntry, ThreatAssessment

logger = logging.getLogger("threatscope.api.assess")

router = APIRouter()


class DecodeRequest(BaseModel):
    data: str = Field(..., min_length=10, description="0x-prefixed calldata")


class DecodeResponse(BaseModel):
    selector: str
    known: bool
    method: str | None = None
    signature: str | None = None
    risk_tier: str | None = None
    category: str | None = None
    params: dict[str, Any] = Field(default_factory=dict)


async def _assess(
    engine: AssessmentEngine,
    payload: dict[str, Any],
    audit: AuditLogger | None,
) -> ThreatAssessment:
    assessment = await engine.assess(payload)
    if audit is not None:
        await asyncio.to_thread(audit.log, AuditEntry.from_assessment(assessment))
    return assessment


@router.post("/assess/transaction", response_model=ThreatAssessment)
async def assess_transaction(
    payload: dict[str, Any] = Body(...),
    engine: AssessmentEngine = Depends(get_transaction_engine),
    audit: AuditLogger | None = Depends(get_audit_logger),
):
    """Score a single transaction on the 0-100 scale."""
    return await _assess(engine, payload, audit)


@router.post("/assess/contract", response_model=ThreatAssessment)
async def assess_contract(
    payload: dict[str, Any] = Body(...),
    engine: AssessmentEngine = Depends(get_contract_engine),
    audit: AuditLogger | None = Depends(get_audit_logger),
):
    """Score a token contract on the 1-10 rug-pull scale."""
    return await _assess(engine, payload, audit)


@router.post("/assess/social", response_model=ThreatAssessment)
async def assess_social(
    payload: dict[str, Any] = Body(...),
    engine: AssessmentEngine = Depends(get_social_engine),
    audit: AuditLogger | None = Depends(get_audit_logger),
):
    """Score a social corpus on the 0-100 scale."""
    return await _assess(engine, payload, audit)


@router.post("/decode", response_model=DecodeResponse)
async def decode(request: DecodeRequest):
    """Decode calldata against the known method table."""
    try:
        selector, params = decode_calldata(request.data)
    except ValueError as e:
        raise InvalidInput(str(e), errors=[{"loc": ["body", "data"], "msg": str(e), "type": "value_error"}]) from e

    spec = METHOD_TABLE.get(selector)
    if spec is None:
        return DecodeResponse(selector=selector, known=False)
    return DecodeResponse(
        selector=selector,
        known=True,
        method=spec.name,
        signature=spec.signature,
        risk_tier=spec.tier.value,
        category=spec.category.value,
        params=params,
    )
