# Test type: End-to-End (E2E) API
# Validation to be executed: Full HTTP round-trip for every API endpoint
# Command: pytest test/test_e2e_api.py -v

"""End-to-end tests that exercise every API endpoint via HTTP using the ASGI
transport (no real server process required).  These tests verify request/
response contracts, status codes, and payload shapes.
"""

from __future__ import annotations

import asyncio
import threading
import time

import pytest

pytestmark = pytest.mark.anyio


# ══════════════════════════════════════════════════════════════════════════
# 1.  Health & performance
# ══════════════════════════════════════════════════════════════════════════


async def test_health_check(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


async def test_performance(client):
    await client.get("/health")
    resp = await client.get("/performance")
    assert resp.status_code == 200
    data = resp.json()
    assert data["memory"].endswith("MB")
    assert data["threads"] >= 1
    assert "X-Response-Time-Ms" in resp.headers


async def test_health_answers_while_store_is_locked(client, store):
    locked = threading.Event()
    release = threading.Event()

    def hold_store():
        with store.transaction():
            locked.set()
            release.wait(timeout=3)

    holder = threading.Thread(target=hold_store)
    holder.start()
    assert locked.wait(timeout=1)
    try:
        perfil = asyncio.ensure_future(client.get("/perfil-risco/1"))
        await asyncio.sleep(0.05)
        started = time.perf_counter()
        health = await client.get("/health")
        elapsed = time.perf_counter() - started
        assert not perfil.done()
    finally:
        release.set()
        holder.join()

    assert health.status_code == 200
    assert elapsed < 0.5
    assert (await perfil).status_code == 200


# ══════════════════════════════════════════════════════════════════════════
# 2.  POST /autenticacao/login
# ══════════════════════════════════════════════════════════════════════════


async def test_login_success(client):
    resp = await client.post("/autenticacao/login", json={"email": "ana@email.com", "senha": "123456"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["clienteId"] == 1
    assert data["token"].startswith("header.")


async def test_login_wrong_password(client):
    resp = await client.post("/autenticacao/login", json={"email": "ana@email.com", "senha": "x"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "E-mail ou senha incorretos"


async def test_login_missing_fields(client):
    resp = await client.post("/autenticacao/login", json={"email": "ana@email.com"})
    assert resp.status_code == 400


# ══════════════════════════════════════════════════════════════════════════
# 3.  Risk profile & score history
# ══════════════════════════════════════════════════════════════════════════


async def test_perfil_risco_mixed_portfolio(client):
    resp = await client.get("/perfil-risco/1")
    assert resp.status_code == 200
    data = resp.json()
    assert data["pontuacao"] == 50
    assert data["perfilRisco"]["name"] == "Moderado"
    assert data["nome"] == "Ana"


async def test_perfil_risco_empty_portfolio_fallback(client):
    resp = await client.get("/perfil-risco/2")
    assert resp.status_code == 200
    data = resp.json()
    assert data["pontuacao"] == 75
    assert data["perfilRisco"]["id"] == 3


async def test_perfil_risco_updates_stored_tier(client, store):
    resp = await client.get("/perfil-risco/3")
    assert resp.json()["pontuacao"] == 0
    assert store.get("users", 3)["riskProfileId"] == 1


async def test_perfil_risco_unknown_client(client):
    resp = await client.get("/perfil-risco/999")
    assert resp.status_code == 404
    assert resp.json()["error"] == "Cliente não encontrado"


async def test_history_records_only_changes(client):
    await client.get("/perfil-risco/1")
    await client.get("/perfil-risco/1")
    resp = await client.get("/pontuacao-history/1")
    assert resp.status_code == 200
    data = resp.json()
    assert data["totalEntries"] == 1
    assert data["history"][0]["pontuacao"] == 50
    assert data["history"][0]["perfilRisco"] == "Moderado"


async def test_history_new_investment_changes_score(client):
    await client.get("/perfil-risco/2")
    created = await client.post(
        "/investimentos",
        json={"clienteId": 2, "productId": 1, "valor": 1000, "prazoMeses": 12},
    )
    assert created.status_code == 201
    resp = await client.get("/perfil-risco/2")
    assert resp.json()["pontuacao"] == 0

    history = (await client.get("/pontuacao-history/2")).json()
    assert [e["pontuacao"] for e in history["history"]] == [75, 0]


async def test_history_unknown_client(client):
    resp = await client.get("/pontuacao-history/999")
    assert resp.status_code == 404


async def test_update_perfil_risco(client, store):
    resp = await client.post("/perfil-risco", json={"clienteId": 1, "riskProfileId": 3})
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["perfilRisco"]["name"] == "Agressivo"
    assert store.get("users", 1)["riskProfileId"] == 3


async def test_update_perfil_risco_missing_fields(client):
    resp = await client.post("/perfil-risco", json={"clienteId": 1})
    assert resp.status_code == 400


async def test_update_perfil_risco_unknown_profile(client):
    resp = await client.post("/perfil-risco", json={"clienteId": 1, "riskProfileId": 9})
    assert resp.status_code == 404
    assert resp.json()["error"] == "Perfil de risco não encontrado"


# ══════════════════════════════════════════════════════════════════════════
# 4.  Catalog
# ══════════════════════════════════════════════════════════════════════════


async def test_produtos_recomendados(client):
    resp = await client.get("/produtos-recomendados/agressivo")
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == [2, 3]


async def test_produtos_recomendados_case_insensitive(client):
    resp = await client.get("/produtos-recomendados/Conservador")
    assert [p["id"] for p in resp.json()] == [1]


async def test_produtos_recomendados_unknown(client):
    resp = await client.get("/produtos-recomendados/ousado")
    assert resp.status_code == 404


async def test_products_filtered_by_profile(client):
    resp = await client.get("/products", params={"riskProfileId": 2})
    assert [p["id"] for p in resp.json()] == [2]


async def test_product_by_id(client):
    resp = await client.get("/products/3")
    assert resp.status_code == 200
    assert resp.json()["risco"] == "Alto"
    assert (await client.get("/products/99")).status_code == 404


async def test_risk_profiles(client):
    resp = await client.get("/riskProfiles")
    assert [p["name"] for p in resp.json()] == ["Conservador", "Moderado", "Agressivo"]


# ══════════════════════════════════════════════════════════════════════════
# 5.  POST /simular-investimento
# ══════════════════════════════════════════════════════════════════════════


async def test_simulation_success(client):
    resp = await client.post(
        "/simular-investimento",
        json={"valorInicial": 1000, "prazoMeses": 12, "produtoId": 1},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["valorFinal"] == pytest.approx(1120.0, abs=0.01)
    assert data["rendimentoTotal"] == pytest.approx(120.0, abs=0.01)
    assert len(data["detalheMensal"]) == 12
    assert data["produto"]["nome"] == "CDB"


async def test_simulation_unknown_product(client):
    resp = await client.post(
        "/simular-investimento",
        json={"valorInicial": 1000, "prazoMeses": 12, "produtoId": 99},
    )
    assert resp.status_code == 404
    assert resp.json()["error"] == "Produto não encontrado"


@pytest.mark.parametrize("body", [
    {"valorInicial": 50, "prazoMeses": 12, "produtoId": 1},
    {"valorInicial": 1000, "prazoMeses": 0, "produtoId": 1},
    {"valorInicial": 1000, "prazoMeses": 361, "produtoId": 1},
    {"prazoMeses": 12, "produtoId": 1},
])
async def test_simulation_invalid_input(client, body):
    resp = await client.post("/simular-investimento", json=body)
    assert resp.status_code == 422


# ══════════════════════════════════════════════════════════════════════════
# 6.  Investments
# ══════════════════════════════════════════════════════════════════════════


async def test_list_investments(client):
    resp = await client.get("/investimentos/1")
    assert resp.status_code == 200
    data = resp.json()
    assert len(data) == 2
    assert all("produto" in inv for inv in data)


async def test_create_investment(client):
    resp = await client.post(
        "/investimentos",
        json={"clienteId": 1, "productId": 2, "valor": 2500, "prazoMeses": 24},
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["success"] is True
    assert data["investment"]["id"] == 4
    assert data["investment"]["valorAtual"] == 2500
    assert data["investment"]["produto"]["id"] == 2

    listed = (await client.get("/investimentos/1")).json()
    assert len(listed) == 3


async def test_create_investment_unknown_client(client):
    resp = await client.post(
        "/investimentos",
        json={"clienteId": 99, "productId": 2, "valor": 2500, "prazoMeses": 24},
    )
    assert resp.status_code == 404


async def test_portfolio_overview(client):
    resp = await client.get("/investimentos/1/resumo")
    assert resp.status_code == 200
    data = resp.json()
    assert data["resumo"]["totalInvestido"] == 2000.0
    assert {d["tipo"] for d in data["distribuicao"]} == {"CDB", "Fundo"}
    assert data["evolucao"]["labels"][0] == "01/24"


async def test_refresh_values(client):
    resp = await client.post("/investimentos/1/atualizar-valores")
    assert resp.status_code == 200
    data = resp.json()
    assert all(inv["valorAtual"] > inv["valor"] for inv in data)


# ══════════════════════════════════════════════════════════════════════════
# 7.  Products without an annual rate
# ══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def unrated_product(store):
    store.append("products", {"id": 50, "nome": "Sem taxa", "risco": "Baixo"})
    store.append("investments", {
        "id": 10, "userId": 4, "productId": 50, "valor": 1000,
        "dataInicio": "2024-01-01", "prazoMeses": 12, "valorAtual": 1000,
    })
    return store


async def test_simulation_without_rate_keeps_principal(client, unrated_product):
    resp = await client.post(
        "/simular-investimento",
        json={"valorInicial": 1000, "prazoMeses": 12, "produtoId": 50},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["valorFinal"] == 1000.0
    assert data["rendimentoTotal"] == 0.0
    assert data["produto"]["taxaAnual"] is None


async def test_products_list_includes_unrated(client, unrated_product):
    resp = await client.get("/products")
    assert resp.status_code == 200
    assert 50 in [p["id"] for p in resp.json()]
    assert (await client.get("/products/50")).json()["taxaAnual"] is None


async def test_investments_with_unrated_product(client, unrated_product):
    resp = await client.get("/investimentos/4")
    assert resp.status_code == 200
    assert resp.json()[0]["produto"]["nome"] == "Sem taxa"

    overview = await client.get("/investimentos/4/resumo")
    assert overview.status_code == 200


async def test_refresh_unrated_uses_default_rate(client, unrated_product):
    resp = await client.post("/investimentos/4/atualizar-valores")
    assert resp.status_code == 200
    assert resp.json()[0]["valorAtual"] > 1000
