"""Pydantic request / response schemas for all API endpoints.

Field names follow the JSON contract the front-end already consumes
(Portuguese, camelCase), e.g. ``valorInicial``, ``prazoMeses``.
"""

from __future__ import annotations
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from invest_api.config import settings


# ── Catalog documents ────────────────────────────────────────────────────

class Product(BaseModel):
    """Investment product (read-only reference data)."""
    model_config = ConfigDict(extra="allow")

    id: int
    nome: str
    tipo: Optional[str] = None
    taxaAnual: Optional[float] = Field(None, description="Annual nominal rate, decimal fraction (e.g. 0.0617)")
    risco: Optional[str] = Field(None, description="Free-text risk label (baixo / médio / alto)")
    aplicacaoMinima: Optional[float] = None
    liquidez: Optional[str] = None
    riskProfileId: Optional[int] = None

class RiskProfile(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    name: str
    nivel: Optional[str] = None
    description: Optional[str] = None
    productIds: List[int] = Field(default_factory=list)

class Investment(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    userId: int
    productId: int
    valor: float = Field(..., description="Original principal")
    dataInicio: str = Field(..., description="Start date (YYYY-MM-DD)")
    prazoMeses: int
    valorAtual: Optional[float] = Field(None, description="Current value snapshot")
    produto: Optional[Product] = None

# ── 1. Login  (/autenticacao/login) ──────────────────────────────────────

class LoginRequest(BaseModel):
    email: Optional[str] = None
    senha: Optional[str] = None

class LoginResponse(BaseModel):
    token: str
    clienteId: int

# ── 2. Risk profile  (/perfil-risco) ─────────────────────────────────────

class PerfilRiscoResponse(BaseModel):
    clienteId: int
    nome: Optional[str] = None
    email: Optional[str] = None
    perfilRisco: Optional[RiskProfile] = None
    pontuacao: int = Field(..., ge=0, le=100, description="Risk score 0-100")

class UpdatePerfilRequest(BaseModel):
    clienteId: Optional[int] = None
    riskProfileId: Optional[int] = None

class UpdatePerfilResponse(BaseModel):
    success: bool
    message: str
    clienteId: int
    nome: Optional[str] = None
    perfilRisco: RiskProfile

# ── 3. Score history  (/pontuacao-history) ───────────────────────────────

class PontuacaoHistoryEntry(BaseModel):
    id: int
    clienteId: int
    pontuacao: int
    riskProfileId: int
    timestamp: str
    perfilRisco: str = Field(..., description="Tier name at the time of the entry")

class PontuacaoHistoryResponse(BaseModel):
    clienteId: int
    totalEntries: int
    history: List[PontuacaoHistoryEntry]

# ── 4. Simulation  (/simular-investimento) ───────────────────────────────

class SimulationRequest(BaseModel):
    valorInicial: float = Field(..., ge=settings.MIN_PRINCIPAL, description="Principal (R$)")
    prazoMeses: int = Field(..., ge=1, le=settings.MAX_TERM_MONTHS, description="Term in months")
    produtoId: int

class MonthlyDetail(BaseModel):
    mes: int
    saldo: float = Field(..., description="Balance after this month (2 dp)")
    rendimento: float = Field(..., description="Return earned this month (2 dp)")

class SimulationResponse(BaseModel):
    valorInicial: float
    valorFinal: float
    rendimentoTotal: float
    prazoMeses: int
    produto: Product
    detalheMensal: List[MonthlyDetail]

# ── 5. Investments  (/investimentos) ─────────────────────────────────────

class CreateInvestmentRequest(BaseModel):
    clienteId: int
    productId: int
    valor: float = Field(..., gt=0)
    prazoMeses: int = Field(..., ge=1, le=settings.MAX_TERM_MONTHS)

class CreateInvestmentResponse(BaseModel):
    success: bool
    message: str
    investment: Investment

class PortfolioSummary(BaseModel):
    totalInvestido: float
    totalAtual: float
    rendimento: float
    rentabilidadePercentual: float

class TypeDistribution(BaseModel):
    tipo: str
    valor: float
    quantidade: int

class EvolutionSeries(BaseModel):
    labels: List[str]
    valorInvestido: List[float]
    valorAtual: List[float]

class PortfolioOverview(BaseModel):
    clienteId: int
    resumo: PortfolioSummary
    distribuicao: List[TypeDistribution]
    evolucao: EvolutionSeries

# ── 6. Performance Report  (/performance) ────────────────────────────────

class PerformanceResponse(BaseModel):
    time: str = Field(..., description="Last response time (HH:mm:ss.SSS)")
    memory: str = Field(..., description="Current memory usage (e.g. '123.45 MB')")
    threads: int = Field(..., description="Number of active threads")
