# controle_estoque/domain/models.py
"""
Modelos (dataclasses) do domínio.

Observação importante:
- Category, Product e Movement espelham as linhas do catálogo e do
  histórico de movimentações; os repositórios devolvem estas dataclasses.
- Os tipos derivados (ConsumptionEntry, CategoryBreakdown, Report, ...)
  são congelados: são recalculados a cada pedido de relatório e nunca
  persistidos.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


class ReportContractError(ValueError):
    """Entrada fora do contrato do motor de relatórios (período, tipo ou filtro)."""


class MovementType(str, Enum):
    ENTRY = "entry"
    EXIT = "exit"


class Period(str, Enum):
    """Janela de tempo retroativa usada para filtrar movimentações."""
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    LAST_90_DAYS = "90d"
    ALL = "all"

    @property
    def days(self) -> Optional[int]:
        return _PERIOD_DAYS[self]

    @property
    def label(self) -> str:
        return _PERIOD_LABELS[self]

    @classmethod
    def parse(cls, value) -> "Period":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ReportContractError(f"período inválido: {value!r}") from None


_PERIOD_DAYS = {
    Period.LAST_7_DAYS: 7,
    Period.LAST_30_DAYS: 30,
    Period.LAST_90_DAYS: 90,
    Period.ALL: None,
}

_PERIOD_LABELS = {
    Period.LAST_7_DAYS: "7 dias",
    Period.LAST_30_DAYS: "30 dias",
    Period.LAST_90_DAYS: "90 dias",
    Period.ALL: "Tudo",
}


class ReportKind(str, Enum):
    ENTRIES = "entries"
    EXITS = "exits"
    GENERAL = "general"
    CONSUMPTION = "consumption"

    @classmethod
    def parse(cls, value) -> "ReportKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ReportContractError(f"tipo de relatório inválido: {value!r}") from None


class Urgency(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    OK = "ok"


# -------------------------
# Catálogo e movimentações
# -------------------------

@dataclass
class Category:
    id: str
    name: str
    color: str = "#64748B"


@dataclass
class Product:
    """Cadastro de produto; `quantity` é o estoque atual."""
    id: str
    name: str
    category_id: str
    quantity: int = 0
    min_stock: int = 0
    price: float = 0.0
    unit: str = "un"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Movement:
    """Entrada ou saída registrada. Imutável depois de criada."""
    id: str
    product_id: str
    type: MovementType
    quantity: int
    created_at: datetime
    note: Optional[str] = None

    @property
    def is_entry(self) -> bool:
        return self.type == MovementType.ENTRY

    @property
    def is_exit(self) -> bool:
        return self.type == MovementType.EXIT


@dataclass(frozen=True)
class Snapshot:
    """Cópia consistente do catálogo e do histórico, entregue ao motor."""
    categories: Tuple[Category, ...] = ()
    products: Tuple[Product, ...] = ()
    movements: Tuple[Movement, ...] = ()


# -------------------------
# Tipos derivados
# -------------------------

@dataclass(frozen=True)
class ProductTotal:
    """Linha de ranking: soma de uma das pontas (entradas ou saídas) por produto."""
    product: Product
    quantity: int
    value: float
    movement_count: int


@dataclass(frozen=True)
class CategoryBreakdown:
    category: Category
    product_count: int
    total_quantity: int
    total_value: float


@dataclass(frozen=True)
class MovementTotals:
    total_entry_qty: int = 0
    total_exit_qty: int = 0
    entry_value: float = 0.0
    exit_value: float = 0.0
    entry_count: int = 0
    exit_count: int = 0
    unresolved_count: int = 0

    @property
    def net_quantity(self) -> int:
        return self.total_entry_qty - self.total_exit_qty

    @property
    def net_value(self) -> float:
        return self.entry_value - self.exit_value

    @property
    def movement_count(self) -> int:
        return self.entry_count + self.exit_count


@dataclass(frozen=True)
class Aggregation:
    entry_ranking: Tuple[ProductTotal, ...] = ()
    exit_ranking: Tuple[ProductTotal, ...] = ()
    category_breakdown: Tuple[CategoryBreakdown, ...] = ()
    totals: MovementTotals = field(default_factory=MovementTotals)


@dataclass(frozen=True)
class ConsumptionEntry:
    product_id: str
    product_name: str
    unit: str
    category: Optional[Category]
    current_quantity: int
    total_consumed: int
    movement_count: int
    active_days: int
    daily_average: float
    monthly_projection: float
    days_until_empty: Optional[int]
    cost_projection: float
    urgency: Urgency


@dataclass(frozen=True)
class MovementLine:
    """Movimentação anotada para listagens; `product` é None quando o produto foi removido."""
    movement: Movement
    product: Optional[Product]
    value: float

    @property
    def removed(self) -> bool:
        return self.product is None

    @property
    def product_name(self) -> Optional[str]:
        return self.product.name if self.product is not None else None


@dataclass(frozen=True)
class StockSummary:
    total_value: float = 0.0
    product_count: int = 0
    average_price: float = 0.0
    low_stock_count: int = 0
    zero_stock_count: int = 0


@dataclass(frozen=True)
class Report:
    kind: ReportKind
    period: Period
    generated_at: datetime
    product_filter: frozenset = frozenset()
    movements: Tuple[Movement, ...] = ()
    totals: MovementTotals = field(default_factory=MovementTotals)
    entry_ranking: Tuple[ProductTotal, ...] = ()
    exit_ranking: Tuple[ProductTotal, ...] = ()
    entry_lines: Tuple[MovementLine, ...] = ()
    exit_lines: Tuple[MovementLine, ...] = ()
    category_breakdown: Tuple[CategoryBreakdown, ...] = ()
    stock: Optional[StockSummary] = None
    consumption: Tuple[ConsumptionEntry, ...] = ()
    urgency_counts: Mapping[Urgency, int] = field(default_factory=lambda: MappingProxyType({}))
    total_cost_projection: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.movements
