# controle_estoque/usecases/agregacao.py
"""
Agregação de movimentações:
- ranking de produtos por quantidade (entradas e saídas separadamente)
- composição por categoria (estado atual do catálogo)
- totais do período (quantidade, valor, saldo líquido, contagens)

Valores monetários usam o preço ATUAL do produto; não há histórico de preços.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from controle_estoque.domain.models import (
    Aggregation,
    Category,
    CategoryBreakdown,
    Movement,
    MovementTotals,
    MovementType,
    Product,
    ProductTotal,
)


def index_products(products: Iterable[Product]) -> Dict[str, Product]:
    return {p.id: p for p in products}


def rank_by_product(movements: Iterable[Movement], by_id: Dict[str, Product]) -> List[ProductTotal]:
    """
    Soma quantidade por produto e ordena de forma decrescente.
    Empates mantêm a ordem de primeira aparição (sort estável).
    Movimentações de produtos ausentes do catálogo são ignoradas.
    """
    acc: Dict[str, List[int]] = {}
    for m in movements:
        if m.product_id not in by_id:
            continue
        it = acc.setdefault(m.product_id, [0, 0])
        it[0] += m.quantity
        it[1] += 1

    out = [
        ProductTotal(
            product=by_id[pid],
            quantity=qty,
            value=qty * float(by_id[pid].price),
            movement_count=count,
        )
        for pid, (qty, count) in acc.items()
    ]
    out.sort(key=lambda r: -r.quantity)
    return out


def category_breakdown(products: Sequence[Product], categories: Iterable[Category]) -> List[CategoryBreakdown]:
    """
    Por categoria: nº de produtos, soma das quantidades e do valor (qtd × preço).
    Usa o catálogo inteiro, independente do período. Categorias sem produtos
    ficam de fora. Ordenado por valor total decrescente.
    """
    out: List[CategoryBreakdown] = []
    for cat in categories:
        cat_products = [p for p in products if p.category_id == cat.id]
        if not cat_products:
            continue
        out.append(
            CategoryBreakdown(
                category=cat,
                product_count=len(cat_products),
                total_quantity=sum(p.quantity for p in cat_products),
                total_value=sum(p.quantity * float(p.price) for p in cat_products),
            )
        )
    out.sort(key=lambda c: -c.total_value)
    return out


def aggregate(
    movements: Sequence[Movement],
    products: Sequence[Product],
    categories: Sequence[Category],
) -> Aggregation:
    by_id = index_products(products)
    entries = [m for m in movements if m.type == MovementType.ENTRY]
    exits = [m for m in movements if m.type == MovementType.EXIT]

    entry_ranking = rank_by_product(entries, by_id)
    exit_ranking = rank_by_product(exits, by_id)

    totals = MovementTotals(
        total_entry_qty=sum(r.quantity for r in entry_ranking),
        total_exit_qty=sum(r.quantity for r in exit_ranking),
        entry_value=sum(r.value for r in entry_ranking),
        exit_value=sum(r.value for r in exit_ranking),
        entry_count=len(entries),
        exit_count=len(exits),
        unresolved_count=sum(1 for m in movements if m.product_id not in by_id),
    )

    return Aggregation(
        entry_ranking=tuple(entry_ranking),
        exit_ranking=tuple(exit_ranking),
        category_breakdown=tuple(category_breakdown(products, categories)),
        totals=totals,
    )
