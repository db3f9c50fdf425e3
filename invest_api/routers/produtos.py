"""Routers for catalog endpoints:
    GET  /produtos-recomendados/{perfil}
    GET  /products
    GET  /products/{productId}
    GET  /riskProfiles
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends

from invest_api.models.schemas import Product, RiskProfile
from invest_api.services.catalog_service import (
    get_product,
    list_products,
    list_risk_profiles,
    recommended_products,
)
from invest_api.store import JsonDocumentStore, get_store

router = APIRouter(tags=["Catalog"])


@router.get(
    "/produtos-recomendados/{perfil}",
    response_model=List[Product],
    summary="Products recommended for a risk profile level",
)
def produtos_recomendados(
    perfil: str,
    store: JsonDocumentStore = Depends(get_store),
) -> List[Product]:
    """*perfil* is the profile ``nivel`` (e.g. ``conservador``), case-insensitive."""
    return [Product(**p) for p in recommended_products(store, perfil)]


@router.get("/products", response_model=List[Product])
def products(
    riskProfileId: Optional[int] = None,
    store: JsonDocumentStore = Depends(get_store),
) -> List[Product]:
    return [Product(**p) for p in list_products(store, riskProfileId)]


@router.get("/products/{productId}", response_model=Product)
def product(
    productId: int,
    store: JsonDocumentStore = Depends(get_store),
) -> Product:
    return Product(**get_product(store, productId))


@router.get("/riskProfiles", response_model=List[RiskProfile])
def risk_profiles(store: JsonDocumentStore = Depends(get_store)) -> List[RiskProfile]:
    return [RiskProfile(**p) for p in list_risk_profiles(store)]
