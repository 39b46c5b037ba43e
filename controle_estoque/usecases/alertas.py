# controle_estoque/usecases/alertas.py
"""
Alertas de estoque baixo: produtos com quantidade no mínimo ou abaixo dele.

- `sem_estoque`: quantidade == 0
- `criticos`:    0 < quantidade <= estoque mínimo
Ambas as listas vêm em ordem crescente de quantidade.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from controle_estoque.domain.models import Product
from controle_estoque.domain.policies import estoque_baixo, percentual_do_minimo


@dataclass(frozen=True)
class StockAlert:
    product: Product
    percentual: float

    @property
    def faltante(self) -> int:
        return max(self.product.min_stock - self.product.quantity, 0)


@dataclass(frozen=True)
class AlertasEstoque:
    sem_estoque: Tuple[StockAlert, ...] = ()
    criticos: Tuple[StockAlert, ...] = ()

    @property
    def total(self) -> int:
        return len(self.sem_estoque) + len(self.criticos)


def alertas_estoque_baixo(products: Sequence[Product]) -> AlertasEstoque:
    baixos: List[Product] = sorted(
        (p for p in products if estoque_baixo(p)), key=lambda p: p.quantity
    )
    alerts = [StockAlert(product=p, percentual=percentual_do_minimo(p)) for p in baixos]
    return AlertasEstoque(
        sem_estoque=tuple(a for a in alerts if a.product.quantity == 0),
        criticos=tuple(a for a in alerts if a.product.quantity > 0),
    )
