"""Investment growth — monthly compounding from an annual rate.

Monthly rate (geometric, so twelve compoundings give exactly the annual rate):
    i_m = (1 + r)^(1/12) − 1

Simulation:           saldo_k = saldo_{k−1} × (1 + i_m),  k = 1..n
Present value:        A = P × (1 + i_m)^max(elapsed, 0)

The running balance is carried unrounded; only the reported schedule rows
and totals are rounded to 2 decimals.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Union

from invest_api.exceptions import InvalidInputError, NotFoundError
from invest_api.store import JsonDocumentStore
from invest_api.utils.helpers import parse_date, round_currency

logger = logging.getLogger(__name__)


def monthly_rate(annual_rate: float) -> float:
    """Effective monthly rate equivalent to *annual_rate*."""
    return (1 + annual_rate) ** (1 / 12) - 1


def simulate(principal: float, term_months: int, annual_rate: float) -> dict:
    """Month-by-month compounding schedule.

    Returns dict with keys: valorFinal, rendimentoTotal, detalheMensal.
    """
    if principal <= 0:
        raise InvalidInputError("valorInicial deve ser maior que zero")
    if term_months < 1:
        raise InvalidInputError("prazoMeses deve ser no mínimo 1")

    rate = monthly_rate(annual_rate)
    balance = float(principal)
    schedule: list[dict] = []

    for month in range(1, term_months + 1):
        monthly_return = balance * rate
        balance += monthly_return
        schedule.append({
            "mes": month,
            "saldo": round_currency(balance),
            "rendimento": round_currency(monthly_return),
        })

    final_value = round_currency(balance)
    return {
        "valorFinal": final_value,
        "rendimentoTotal": round_currency(final_value - principal),
        "detalheMensal": schedule,
    }


def elapsed_months(start: Union[str, date], today: Optional[date] = None) -> int:
    """Whole calendar months between *start* and *today*, ignoring the day."""
    start_date = parse_date(start)
    today = today or date.today()
    return (today.year - start_date.year) * 12 + (today.month - start_date.month)


def project_current_value(principal: float, annual_rate: float, elapsed: int) -> float:
    """P × (1 + i_m)^max(elapsed, 0).  Future-dated starts are not discounted."""
    months = max(elapsed, 0)
    if months == 0:
        return principal
    return principal * (1 + monthly_rate(annual_rate)) ** months


# ── Route-level orchestration ────────────────────────────────────────────

def simulate_product(
    store: JsonDocumentStore,
    principal: float,
    term_months: int,
    produto_id: int,
) -> dict:
    """Run :func:`simulate` with the annual rate of a catalog product."""
    product = store.get("products", produto_id)
    if product is None:
        raise NotFoundError("Produto não encontrado")

    result = simulate(principal, term_months, float(product.get("taxaAnual") or 0.0))
    logger.info(
        "Simulation: produto=%s valor=%.2f prazo=%d final=%.2f",
        produto_id, principal, term_months, result["valorFinal"],
    )

    return {
        "valorInicial": principal,
        "valorFinal": result["valorFinal"],
        "rendimentoTotal": result["rendimentoTotal"],
        "prazoMeses": term_months,
        "produto": product,
        "detalheMensal": result["detalheMensal"],
    }
