# Test type: Configuration
# Validation to be executed: Shared fixtures for all test modules
# Command: pytest test/ -v (this file is auto-loaded by pytest)

"""Shared pytest fixtures for the Investment Advisory API test suite."""

from __future__ import annotations

import json

import pytest
from httpx import ASGITransport, AsyncClient

from invest_api.main import app
from invest_api.store import JsonDocumentStore, get_store


@pytest.fixture
def anyio_backend():
    return "asyncio"


# ── Sample data fixtures ─────────────────────────────────────────────────

@pytest.fixture
def seed_data():
    """Three tiers, one product per risk label, and four clients:
    1 → mixed portfolio, 2 → no investments (Agressivo on record),
    3 → single low-risk holding, 4 → no investments (Conservador on record).
    """
    return {
        "users": [
            {"id": 1, "name": "Ana", "email": "ana@email.com", "password": "123456", "riskProfileId": 1},
            {"id": 2, "name": "Bruno", "email": "bruno@email.com", "password": "abc", "riskProfileId": 3},
            {"id": 3, "name": "Carla", "email": "carla@email.com", "password": "xyz", "riskProfileId": 3},
            {"id": 4, "name": "Davi", "email": "davi@email.com", "password": "qwe", "riskProfileId": 1},
        ],
        "riskProfiles": [
            {"id": 1, "name": "Conservador", "nivel": "conservador", "description": "", "productIds": [1]},
            {"id": 2, "name": "Moderado", "nivel": "moderado", "description": "", "productIds": [1, 2]},
            {"id": 3, "name": "Agressivo", "nivel": "agressivo", "description": "", "productIds": [2, 3]},
        ],
        "products": [
            {"id": 1, "nome": "CDB", "tipo": "CDB", "taxaAnual": 0.12, "risco": "Baixo",
             "aplicacaoMinima": 100, "liquidez": "Diária", "riskProfileId": 1},
            {"id": 2, "nome": "Multimercado", "tipo": "Fundo", "taxaAnual": 0.14, "risco": "Médio",
             "aplicacaoMinima": 500, "liquidez": "D+30", "riskProfileId": 2},
            {"id": 3, "nome": "Ações", "tipo": "Fundo", "taxaAnual": 0.18, "risco": "Alto",
             "aplicacaoMinima": 1000, "liquidez": "D+3", "riskProfileId": 3},
        ],
        "investments": [
            {"id": 1, "userId": 1, "productId": 1, "valor": 1000, "dataInicio": "2024-01-10",
             "prazoMeses": 12, "valorAtual": 1000},
            {"id": 2, "userId": 1, "productId": 3, "valor": 1000, "dataInicio": "2024-03-05",
             "prazoMeses": 24, "valorAtual": 1000},
            {"id": 3, "userId": 3, "productId": 1, "valor": 500, "dataInicio": "2024-02-01",
             "prazoMeses": 6, "valorAtual": 520},
        ],
        "pontuacaoHistory": [],
    }


@pytest.fixture
def store(tmp_path, seed_data):
    """A file-backed store in a temp dir, seeded with ``seed_data``."""
    seed_file = tmp_path / "seed.json"
    seed_file.write_text(json.dumps(seed_data), encoding="utf-8")
    return JsonDocumentStore(tmp_path / "db.json", seed_path=seed_file)


@pytest.fixture
async def client(store):
    """Async HTTP client bound to the FastAPI app (no real server needed)."""
    app.dependency_overrides[get_store] = lambda: store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()
