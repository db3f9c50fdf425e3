"""Routers for simulation and investment endpoints:
    POST  /simular-investimento
    GET   /investimentos/{clienteId}
    POST  /investimentos
    GET   /investimentos/{clienteId}/resumo
    POST  /investimentos/{clienteId}/atualizar-valores
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from invest_api.database import record_audit
from invest_api.models.db_models import SimulationAudit
from invest_api.models.schemas import (
    CreateInvestmentRequest,
    CreateInvestmentResponse,
    Investment,
    PortfolioOverview,
    SimulationRequest,
    SimulationResponse,
)
from invest_api.services.portfolio_service import (
    create_investment,
    list_investments,
    portfolio_overview,
    refresh_current_values,
)
from invest_api.services.simulation_service import simulate_product
from invest_api.store import JsonDocumentStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Investments"])


# ── Simulation ───────────────────────────────────────────────────────────

@router.post(
    "/simular-investimento",
    response_model=SimulationResponse,
    summary="Simulate monthly compounding for a catalog product",
)
async def simular_investimento(
    body: SimulationRequest,
    store: JsonDocumentStore = Depends(get_store),
) -> SimulationResponse:
    """Project *valorInicial* over *prazoMeses* at the product's annual rate,
    compounded monthly with the equivalent geometric monthly rate.

    Stays ``async`` for the audit write; the store read goes to the threadpool.
    """
    result = await run_in_threadpool(
        simulate_product, store, body.valorInicial, body.prazoMeses, body.produtoId,
    )

    await record_audit(SimulationAudit(
        product_id=body.produtoId,
        principal=body.valorInicial,
        term_months=body.prazoMeses,
        annual_rate=float(result["produto"].get("taxaAnual") or 0.0),
        final_value=result["valorFinal"],
    ))

    return SimulationResponse(**result)


# ── Investments ──────────────────────────────────────────────────────────

@router.get(
    "/investimentos/{clienteId}",
    response_model=List[Investment],
    summary="Client investments joined with their product",
)
def investimentos_cliente(
    clienteId: int,
    store: JsonDocumentStore = Depends(get_store),
) -> List[Investment]:
    return [Investment(**inv) for inv in list_investments(store, clienteId)]


@router.post(
    "/investimentos",
    response_model=CreateInvestmentResponse,
    status_code=201,
    summary="Record a new investment for a client",
)
def criar_investimento(
    body: CreateInvestmentRequest,
    store: JsonDocumentStore = Depends(get_store),
) -> CreateInvestmentResponse:
    investment = create_investment(
        store,
        cliente_id=body.clienteId,
        product_id=body.productId,
        valor=body.valor,
        prazo_meses=body.prazoMeses,
    )
    return CreateInvestmentResponse(
        success=True,
        message="Investimento criado com sucesso",
        investment=Investment(**investment),
    )


@router.get(
    "/investimentos/{clienteId}/resumo",
    response_model=PortfolioOverview,
    summary="Portfolio totals, distribution by product type and monthly evolution",
)
def resumo_carteira(
    clienteId: int,
    store: JsonDocumentStore = Depends(get_store),
) -> PortfolioOverview:
    return PortfolioOverview(**portfolio_overview(store, clienteId))


@router.post(
    "/investimentos/{clienteId}/atualizar-valores",
    response_model=List[Investment],
    summary="Re-project valorAtual of every client investment to today",
)
def atualizar_valores(
    clienteId: int,
    store: JsonDocumentStore = Depends(get_store),
) -> List[Investment]:
    refreshed = refresh_current_values(store, clienteId)
    logger.info("Refreshed %d investment values for cliente=%s", len(refreshed), clienteId)
    return [Investment(**inv) for inv in refreshed]
