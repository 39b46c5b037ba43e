# controle_estoque/usecases/painel.py
"""
Painel inicial: números gerais do estoque e últimas movimentações.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from controle_estoque.config import DEFAULTS
from controle_estoque.domain.models import Category, Movement, Product
from controle_estoque.domain.policies import estoque_baixo


@dataclass(frozen=True)
class Painel:
    total_itens: int
    valor_total: float
    produtos: int
    categorias: int
    estoque_baixo: int
    produtos_por_categoria: Tuple[Tuple[Category, int], ...]
    recentes: Tuple[Movement, ...]


def monta_painel(
    products: Sequence[Product],
    categories: Sequence[Category],
    movements: Sequence[Movement],
    recentes: int = DEFAULTS.movimentos_recentes,
) -> Painel:
    ordenados = sorted(movements, key=lambda m: m.created_at, reverse=True)
    return Painel(
        total_itens=sum(p.quantity for p in products),
        valor_total=sum(p.quantity * float(p.price) for p in products),
        produtos=len(products),
        categorias=len(categories),
        estoque_baixo=sum(1 for p in products if estoque_baixo(p)),
        produtos_por_categoria=tuple(
            (c, sum(1 for p in products if p.category_id == c.id)) for c in categories
        ),
        recentes=tuple(ordenados[: max(0, int(recentes))]),
    )
