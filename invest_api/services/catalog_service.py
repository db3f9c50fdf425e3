"""Read-only catalog lookups: products and risk profiles."""

from __future__ import annotations

from typing import List, Optional

from invest_api.exceptions import NotFoundError
from invest_api.store import Document, JsonDocumentStore


def list_products(store: JsonDocumentStore, risk_profile_id: Optional[int] = None) -> List[Document]:
    if risk_profile_id is None:
        return store.all("products")
    return store.filter("products", riskProfileId=risk_profile_id)


def get_product(store: JsonDocumentStore, product_id: int) -> Document:
    product = store.get("products", product_id)
    if product is None:
        raise NotFoundError("Produto não encontrado")
    return product


def list_risk_profiles(store: JsonDocumentStore) -> List[Document]:
    return store.all("riskProfiles")


def recommended_products(store: JsonDocumentStore, nivel: str) -> List[Document]:
    """Products listed in the ``productIds`` of the profile with this ``nivel``."""
    wanted = nivel.strip().lower()
    profile = next(
        (p for p in store.all("riskProfiles") if str(p.get("nivel", "")).lower() == wanted),
        None,
    )
    if profile is None:
        raise NotFoundError("Perfil de risco não encontrado")

    ids = set(profile.get("productIds") or [])
    return [p for p in store.all("products") if p.get("id") in ids]
