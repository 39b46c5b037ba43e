# controle_estoque/usecases/consumo.py
"""
Projeção de consumo por produto.

Para cada produto do catálogo com ao menos uma saída no conjunto filtrado:
1) total consumido e nº de saídas;
2) dias ativos: tamanho da janela fixa (7/30/90) ou, no período `all`,
   o intervalo entre a primeira e a última saída DO PRODUTO (mínimo 1);
3) média diária, projeção mensal e custo projetado (preço atual);
4) dias até zerar o estoque ATUAL e classificação de urgência.

Produtos sem saída no período não geram linha.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Sequence

from controle_estoque.config import DEFAULTS
from controle_estoque.domain import formulas
from controle_estoque.domain.models import (
    Category,
    ConsumptionEntry,
    Movement,
    MovementType,
    Period,
    Product,
)
from controle_estoque.domain.policies import classifica_urgencia


class _Acumulado:
    __slots__ = ("total", "count", "first", "last")

    def __init__(self, m: Movement):
        self.total = 0
        self.count = 0
        self.first: datetime = m.created_at
        self.last: datetime = m.created_at

    def add(self, m: Movement) -> None:
        self.total += m.quantity
        self.count += 1
        if m.created_at < self.first:
            self.first = m.created_at
        if m.created_at > self.last:
            self.last = m.created_at


def project_consumption(
    exit_movements: Sequence[Movement],
    products: Sequence[Product],
    categories: Sequence[Category],
    period: Period,
) -> List[ConsumptionEntry]:
    period = Period.parse(period)
    by_id: Dict[str, Product] = {p.id: p for p in products}
    cat_by_id: Dict[str, Category] = {c.id: c for c in categories}

    acc: Dict[str, _Acumulado] = {}
    for m in exit_movements:
        if m.type != MovementType.EXIT or m.product_id not in by_id:
            continue
        if m.product_id not in acc:
            acc[m.product_id] = _Acumulado(m)
        acc[m.product_id].add(m)

    out: List[ConsumptionEntry] = []
    for pid, a in acc.items():
        p = by_id[pid]
        dias = formulas.active_days(period.days, a.first, a.last)
        media = formulas.daily_average(a.total, dias)
        mensal = formulas.monthly_projection(media, DEFAULTS.dias_mes)
        restante = formulas.days_until_empty(p.quantity, media)
        out.append(
            ConsumptionEntry(
                product_id=pid,
                product_name=p.name,
                unit=p.unit,
                category=cat_by_id.get(p.category_id),
                current_quantity=p.quantity,
                total_consumed=a.total,
                movement_count=a.count,
                active_days=dias,
                daily_average=media,
                monthly_projection=mensal,
                days_until_empty=restante,
                cost_projection=formulas.cost_projection(mensal, p.price),
                urgency=classifica_urgencia(restante),
            )
        )

    out.sort(key=lambda e: -e.total_consumed)
    return out
