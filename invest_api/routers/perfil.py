"""Routers for risk-profile endpoints:
    GET   /perfil-risco/{clienteId}
    POST  /perfil-risco
    GET   /pontuacao-history/{clienteId}
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from invest_api.exceptions import InvalidInputError
from invest_api.models.schemas import (
    PerfilRiscoResponse,
    PontuacaoHistoryResponse,
    UpdatePerfilRequest,
    UpdatePerfilResponse,
)
from invest_api.services.risk_service import evaluate_client, score_history, set_risk_profile
from invest_api.store import JsonDocumentStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Risk Profile"])


# ── Score & tier ─────────────────────────────────────────────────────────

@router.get(
    "/perfil-risco/{clienteId}",
    response_model=PerfilRiscoResponse,
    summary="Client risk profile with the score computed from the portfolio",
)
def perfil_risco(
    clienteId: int,
    store: JsonDocumentStore = Depends(get_store),
) -> PerfilRiscoResponse:
    """Compute the 0–100 pontuação from the client's investments.

    Side effects: a history entry is appended when the score changed, and
    the client's stored tier follows the computed one.
    """
    return PerfilRiscoResponse(**evaluate_client(store, clienteId))


@router.post(
    "/perfil-risco",
    response_model=UpdatePerfilResponse,
    summary="Manually assign a risk profile to a client",
)
def update_perfil_risco(
    body: UpdatePerfilRequest,
    store: JsonDocumentStore = Depends(get_store),
) -> UpdatePerfilResponse:
    if not body.clienteId or not body.riskProfileId:
        raise InvalidInputError("clienteId e riskProfileId são obrigatórios")
    return UpdatePerfilResponse(**set_risk_profile(store, body.clienteId, body.riskProfileId))


# ── History ──────────────────────────────────────────────────────────────

@router.get(
    "/pontuacao-history/{clienteId}",
    response_model=PontuacaoHistoryResponse,
    summary="Chronological score history for a client",
)
def pontuacao_history(
    clienteId: int,
    store: JsonDocumentStore = Depends(get_store),
) -> PontuacaoHistoryResponse:
    return PontuacaoHistoryResponse(**score_history(store, clienteId))
