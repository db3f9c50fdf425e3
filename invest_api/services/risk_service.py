"""Risk score ("pontuação") and risk-profile tier computation.

Each holding's product risk label maps to an ordinal level:

    "alto" / "agressivo"      → 3
    "baixo" / "conservador"   → 1
    anything else             → 2   (including missing labels)

The value-weighted average level (1–3) is rescaled to 0–100:

    pontuacao = round_half_up((avg − 1) × 50)

Tiers:  0–33 Conservador (1) · 34–66 Moderado (2) · 67–100 Agressivo (3)

A client without investments gets a score derived from the tier name stored
on their record: 25 / 50 / 75.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Iterable, List, Optional

from invest_api.exceptions import NotFoundError
from invest_api.store import Document, JsonDocumentStore
from invest_api.utils.helpers import round_half_up, utc_timestamp

logger = logging.getLogger(__name__)

HISTORY = "pontuacaoHistory"


class RiskLevel(IntEnum):
    BAIXO = 1
    MEDIO = 2
    ALTO = 3


class RiskTier(IntEnum):
    CONSERVADOR = 1
    MODERADO = 2
    AGRESSIVO = 3


@dataclass(frozen=True)
class ScoreResult:
    score: int
    tier: RiskTier


# Checked in order; the first family with a matching substring wins.
_LABEL_FAMILIES: list[tuple[RiskLevel, tuple[str, ...]]] = [
    (RiskLevel.ALTO, ("alto", "agressivo")),
    (RiskLevel.BAIXO, ("baixo", "conservador")),
]

_FALLBACK_SCORES = {
    RiskLevel.BAIXO: 25,
    RiskLevel.MEDIO: 50,
    RiskLevel.ALTO: 75,
}


def classify_risk_label(label: Optional[str]) -> RiskLevel:
    """Map a free-text risk label to its ordinal level; unknown → MEDIO."""
    text = label.lower() if isinstance(label, str) else ""
    for level, needles in _LABEL_FAMILIES:
        if any(needle in text for needle in needles):
            return level
    return RiskLevel.MEDIO


def holding_weight(investment: Document) -> float:
    """Current value when positive, otherwise the original principal."""
    current = investment.get("valorAtual") or 0
    if current > 0:
        return float(current)
    return float(investment.get("valor") or 0)


def _holding_level(investment: Document) -> RiskLevel:
    product = investment.get("produto") or {}
    return classify_risk_label(product.get("risco"))


def weighted_risk_average(holdings: List[Document]) -> float:
    """Value-weighted mean risk level; unweighted when every holding is worth 0."""
    levels = [int(_holding_level(inv)) for inv in holdings]
    weights = [holding_weight(inv) for inv in holdings]
    total = sum(weights)

    if total <= 0:
        return sum(levels) / len(levels)
    return sum(w / total * lvl for w, lvl in zip(weights, levels))


def score_from_average(average: float) -> int:
    """Rescale an average level in [1, 3] to an integer score in [0, 100]."""
    return max(0, min(100, round_half_up((average - 1) * 50)))


def fallback_score(label: Optional[str]) -> int:
    """Representative score for a client who holds nothing."""
    return _FALLBACK_SCORES[classify_risk_label(label)]


def tier_for_score(score: int) -> RiskTier:
    if score <= 33:
        return RiskTier.CONSERVADOR
    if score <= 66:
        return RiskTier.MODERADO
    return RiskTier.AGRESSIVO


def compute_score(investments: Iterable[Document], fallback_label: Optional[str]) -> ScoreResult:
    """Score a portfolio of investments joined with their product (``produto``)."""
    holdings = list(investments)
    if not holdings:
        score = fallback_score(fallback_label)
    else:
        score = score_from_average(weighted_risk_average(holdings))
    return ScoreResult(score=score, tier=tier_for_score(score))


# ── Store side effects ───────────────────────────────────────────────────

def latest_history_entry(store: JsonDocumentStore, cliente_id: int) -> Optional[Document]:
    entries = store.filter(HISTORY, clienteId=cliente_id)
    if not entries:
        return None
    return max(entries, key=lambda e: (e.get("timestamp", ""), e.get("id", 0)))


def record_if_changed(
    store: JsonDocumentStore,
    cliente_id: int,
    score: int,
    tier: int,
    now: Optional[datetime] = None,
) -> bool:
    """Append a history entry unless the latest one already has *score*."""
    with store.transaction():
        last = latest_history_entry(store, cliente_id)
        if last is not None and last.get("pontuacao") == score:
            return False

        store.append(HISTORY, {
            "clienteId": cliente_id,
            "pontuacao": score,
            "riskProfileId": int(tier),
            "timestamp": utc_timestamp(now),
        })

    logger.info(
        "Pontuação changed for cliente=%s: %s → %s",
        cliente_id, last.get("pontuacao") if last else None, score,
    )
    return True


def sync_risk_profile(store: JsonDocumentStore, user: Document, tier: int) -> bool:
    """Align the stored tier id with the computed one; True when updated."""
    if user.get("riskProfileId") == int(tier):
        return False
    store.update("users", user["id"], {"riskProfileId": int(tier)})
    logger.info(
        "Risk profile for cliente=%s updated: %s → %s",
        user["id"], user.get("riskProfileId"), int(tier),
    )
    return True


def _joined_investments(store: JsonDocumentStore, cliente_id: int) -> List[Document]:
    joined = []
    for inv in store.filter("investments", userId=cliente_id):
        joined.append({**inv, "produto": store.get("products", inv.get("productId"))})
    return joined


def _require_user(store: JsonDocumentStore, cliente_id: int) -> Document:
    user = store.get("users", cliente_id)
    if user is None:
        raise NotFoundError("Cliente não encontrado")
    return user


# ── Public API ────────────────────────────────────────────────────────────

def evaluate_client(
    store: JsonDocumentStore,
    cliente_id: int,
    now: Optional[datetime] = None,
) -> dict:
    """Compute, record and persist the client's score and tier.

    Returns dict with keys: clienteId, nome, email, perfilRisco, pontuacao.
    """
    with store.transaction():
        user = _require_user(store, cliente_id)
        stored_profile = store.get("riskProfiles", user.get("riskProfileId"))
        fallback_label = (stored_profile or {}).get("name")

        result = compute_score(_joined_investments(store, cliente_id), fallback_label)

        record_if_changed(store, cliente_id, result.score, result.tier, now=now)
        sync_risk_profile(store, user, result.tier)

        profile = store.get("riskProfiles", int(result.tier))

    return {
        "clienteId": user["id"],
        "nome": user.get("name"),
        "email": user.get("email"),
        "perfilRisco": profile,
        "pontuacao": result.score,
    }


def score_history(store: JsonDocumentStore, cliente_id: int) -> dict:
    """Chronological score history enriched with the tier name."""
    _require_user(store, cliente_id)

    entries = sorted(
        store.filter(HISTORY, clienteId=cliente_id),
        key=lambda e: (e.get("timestamp", ""), e.get("id", 0)),
    )
    names = {p["id"]: p.get("name") for p in store.all("riskProfiles")}
    history = [
        {**entry, "perfilRisco": names.get(entry.get("riskProfileId")) or "Desconhecido"}
        for entry in entries
    ]

    return {
        "clienteId": cliente_id,
        "totalEntries": len(history),
        "history": history,
    }


def set_risk_profile(store: JsonDocumentStore, cliente_id: int, risk_profile_id: int) -> dict:
    """Manually assign a tier to a client."""
    user = _require_user(store, cliente_id)
    profile = store.get("riskProfiles", risk_profile_id)
    if profile is None:
        raise NotFoundError("Perfil de risco não encontrado")

    store.update("users", cliente_id, {"riskProfileId": risk_profile_id})
    logger.info("Risk profile for cliente=%s set to %s", cliente_id, risk_profile_id)

    return {
        "success": True,
        "message": "Perfil de risco atualizado com sucesso",
        "clienteId": user["id"],
        "nome": user.get("name"),
        "perfilRisco": profile,
    }
