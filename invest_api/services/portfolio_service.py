"""Client portfolio: listing, new investments, current-value projection and
the aggregates shown on the dashboard (summary, distribution, evolution).
"""

from __future__ import annotations

import calendar
import logging
from datetime import date
from typing import Dict, List, Optional

from invest_api.config import settings
from invest_api.exceptions import NotFoundError
from invest_api.services.simulation_service import elapsed_months, project_current_value
from invest_api.store import Document, JsonDocumentStore
from invest_api.utils.helpers import format_date, month_label, parse_date, round_currency

logger = logging.getLogger(__name__)


def _annual_rate(investment: Document) -> float:
    product = investment.get("produto") or {}
    rate = product.get("taxaAnual")
    return settings.DEFAULT_ANNUAL_RATE if rate is None else float(rate)


def list_investments(store: JsonDocumentStore, cliente_id: int) -> List[Document]:
    """Client investments, each joined with its product under ``produto``."""
    return [
        {**inv, "produto": store.get("products", inv.get("productId"))}
        for inv in store.filter("investments", userId=cliente_id)
    ]


def create_investment(
    store: JsonDocumentStore,
    cliente_id: int,
    product_id: int,
    valor: float,
    prazo_meses: int,
    today: Optional[date] = None,
) -> Document:
    """Record a committed simulation.  No time has elapsed: valorAtual = valor."""
    if store.get("users", cliente_id) is None:
        raise NotFoundError("Cliente não encontrado")
    product = store.get("products", product_id)
    if product is None:
        raise NotFoundError("Produto não encontrado")

    investment = store.append("investments", {
        "userId": cliente_id,
        "productId": product_id,
        "valor": valor,
        "dataInicio": format_date(today or date.today()),
        "prazoMeses": prazo_meses,
        "valorAtual": valor,
    })
    logger.info(
        "Investment created: id=%s cliente=%s produto=%s valor=%.2f",
        investment["id"], cliente_id, product_id, valor,
    )
    return {**investment, "produto": product}


def refresh_current_values(
    store: JsonDocumentStore,
    cliente_id: int,
    today: Optional[date] = None,
) -> List[Document]:
    """Re-project every investment's ``valorAtual`` from its start date."""
    if store.get("users", cliente_id) is None:
        raise NotFoundError("Cliente não encontrado")

    today = today or date.today()
    refreshed = []
    with store.transaction():
        for inv in list_investments(store, cliente_id):
            months = elapsed_months(inv["dataInicio"], today)
            current = round_currency(project_current_value(inv["valor"], _annual_rate(inv), months))
            if current != inv.get("valorAtual"):
                store.update("investments", inv["id"], {"valorAtual": current})
            refreshed.append({**inv, "valorAtual": current})
    return refreshed


# ── Aggregates ────────────────────────────────────────────────────────────

def portfolio_summary(investments: List[Document]) -> dict:
    invested = sum(float(inv.get("valor") or 0) for inv in investments)
    current = sum(float(inv.get("valorAtual") or inv.get("valor") or 0) for inv in investments)
    gain = current - invested
    return {
        "totalInvestido": round_currency(invested),
        "totalAtual": round_currency(current),
        "rendimento": round_currency(gain),
        "rentabilidadePercentual": round_currency(gain / invested * 100) if invested > 0 else 0.0,
    }


def distribution_by_type(investments: List[Document]) -> List[dict]:
    """Current value per product type, largest first."""
    groups: Dict[str, dict] = {}
    for inv in investments:
        tipo = (inv.get("produto") or {}).get("tipo") or "Outros"
        group = groups.setdefault(tipo, {"tipo": tipo, "valor": 0.0, "quantidade": 0})
        group["valor"] += float(inv.get("valorAtual") or 0)
        group["quantidade"] += 1

    for group in groups.values():
        group["valor"] = round_currency(group["valor"])
    return sorted(groups.values(), key=lambda g: g["valor"], reverse=True)


def _next_month(d: date) -> date:
    if d.month == 12:
        return date(d.year + 1, 1, 1)
    return date(d.year, d.month + 1, 1)


def evolution_series(investments: List[Document], today: Optional[date] = None) -> dict:
    """Invested vs. projected value for every month since the first investment.

    Past months project each active investment from its start date; the
    current month reports the stored ``valorAtual``.
    """
    today = today or date.today()
    holdings = sorted(
        (inv for inv in investments if inv.get("produto")),
        key=lambda inv: parse_date(inv["dataInicio"]),
    )
    labels: list[str] = []
    invested_series: list[float] = []
    current_series: list[float] = []

    if not holdings:
        return {"labels": labels, "valorInvestido": invested_series, "valorAtual": current_series}

    first = parse_date(holdings[0]["dataInicio"])
    cursor = date(first.year, first.month, 1)
    this_month = date(today.year, today.month, 1)

    while cursor <= this_month:
        month_end = date(cursor.year, cursor.month, calendar.monthrange(cursor.year, cursor.month)[1])
        active = [inv for inv in holdings if parse_date(inv["dataInicio"]) <= month_end]

        invested = sum(float(inv["valor"]) for inv in active)
        if cursor == this_month:
            current = sum(float(inv.get("valorAtual") or inv["valor"]) for inv in active)
        else:
            current = sum(
                project_current_value(
                    float(inv["valor"]),
                    _annual_rate(inv),
                    elapsed_months(inv["dataInicio"], cursor),
                )
                for inv in active
            )

        labels.append(month_label(cursor))
        invested_series.append(round_currency(invested))
        current_series.append(round_currency(current))
        cursor = _next_month(cursor)

    return {"labels": labels, "valorInvestido": invested_series, "valorAtual": current_series}


def portfolio_overview(store: JsonDocumentStore, cliente_id: int, today: Optional[date] = None) -> dict:
    """Summary, distribution and evolution for the dashboard in one payload."""
    if store.get("users", cliente_id) is None:
        raise NotFoundError("Cliente não encontrado")

    investments = list_investments(store, cliente_id)
    return {
        "clienteId": cliente_id,
        "resumo": portfolio_summary(investments),
        "distribuicao": distribution_by_type(investments),
        "evolucao": evolution_series(investments, today=today),
    }
