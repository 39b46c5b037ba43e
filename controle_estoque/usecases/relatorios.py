# controle_estoque/usecases/relatorios.py
"""
Montagem de relatórios a partir de um snapshot em memória:
- entradas      (ranking + movimentações de entrada do período)
- saidas        (ranking + movimentações de saída do período)
- geral         (totais, rankings, categorias e resumo do estoque)
- consumo       (projeção de consumo, urgências e custo mensal projetado)

O motor é puro: recebe `now` explicitamente, não lê relógio nem banco e
não altera as listas recebidas. `relatorio_do_banco` é o atalho que lê o
snapshot do SQLite e delega para `assemble_report`.
"""

from __future__ import annotations

from datetime import datetime
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence

from controle_estoque.adapters.parsers import utc_now
from controle_estoque.config import DB_PATH
from controle_estoque.domain.models import (
    Category,
    Movement,
    MovementLine,
    MovementType,
    Period,
    Product,
    Report,
    ReportContractError,
    ReportKind,
    StockSummary,
    Urgency,
)
from controle_estoque.domain.periodos import filter_by_period
from controle_estoque.domain.policies import estoque_baixo, sem_estoque
from controle_estoque.infra.logger import log_report, log_system_event
from controle_estoque.infra.migrations import apply_migrations
from controle_estoque.infra.repositories import load_snapshot
from controle_estoque.usecases.agregacao import aggregate, index_products
from controle_estoque.usecases.consumo import project_consumption


# ----------------------
# util
# ----------------------

def normaliza_filtro(product_filter: Optional[Iterable[str]]) -> FrozenSet[str]:
    """Converte o filtro de produtos em frozenset; rejeita ids que não sejam str."""
    if product_filter is None:
        return frozenset()
    if isinstance(product_filter, str):
        raise ReportContractError("product_filter deve ser uma coleção de ids, não uma string")
    ids = list(product_filter)
    for pid in ids:
        if not isinstance(pid, str):
            raise ReportContractError(f"id de produto inválido no filtro: {pid!r}")
    return frozenset(ids)


def resumo_estoque(products: Sequence[Product]) -> StockSummary:
    """Resumo do catálogo inteiro (não depende do período)."""
    if not products:
        return StockSummary()
    return StockSummary(
        total_value=sum(p.quantity * float(p.price) for p in products),
        product_count=len(products),
        average_price=sum(float(p.price) for p in products) / len(products),
        low_stock_count=sum(1 for p in products if estoque_baixo(p)),
        zero_stock_count=sum(1 for p in products if sem_estoque(p)),
    )


def anota_movimentos(movements: Iterable[Movement], by_id: Dict[str, Product]) -> List[MovementLine]:
    """Resolve produto e valor de cada movimentação (produto removido -> None, valor 0)."""
    out: List[MovementLine] = []
    for m in movements:
        p = by_id.get(m.product_id)
        value = m.quantity * float(p.price) if p is not None else 0.0
        out.append(MovementLine(movement=m, product=p, value=value))
    return out


# ----------------------
# montagem
# ----------------------

def assemble_report(
    kind,
    period,
    product_filter: Optional[Iterable[str]],
    movements: Sequence[Movement],
    products: Sequence[Product],
    categories: Sequence[Category],
    now: datetime,
) -> Report:
    """
    Monta um `Report` do tipo pedido.

    `kind` e `period` aceitam o membro do enum ou o seu valor em texto.
    Um `product_filter` não vazio restringe as movimentações antes da
    agregação e da projeção; a composição por categoria continua refletindo
    o catálogo inteiro.
    """
    kind = ReportKind.parse(kind)
    period = Period.parse(period)
    filtro = normaliza_filtro(product_filter)

    log_system_event("assemble_report_start", {
        "kind": kind.value,
        "period": period.value,
        "product_filter": sorted(filtro),
        "movements": len(movements),
    })

    filtered = filter_by_period(movements, period, now)
    if filtro:
        filtered = [m for m in filtered if m.product_id in filtro]

    agg = aggregate(filtered, products, categories)
    by_id = index_products(products)

    fields = {
        "kind": kind,
        "period": period,
        "generated_at": now,
        "product_filter": filtro,
        "movements": tuple(filtered),
        "totals": agg.totals,
        "category_breakdown": agg.category_breakdown,
    }

    if kind == ReportKind.ENTRIES:
        fields["entry_ranking"] = agg.entry_ranking
        fields["entry_lines"] = tuple(
            anota_movimentos((m for m in filtered if m.type == MovementType.ENTRY), by_id)
        )
    elif kind == ReportKind.EXITS:
        fields["exit_ranking"] = agg.exit_ranking
        fields["exit_lines"] = tuple(
            anota_movimentos((m for m in filtered if m.type == MovementType.EXIT), by_id)
        )
    elif kind == ReportKind.GENERAL:
        fields["entry_ranking"] = agg.entry_ranking
        fields["exit_ranking"] = agg.exit_ranking
        fields["stock"] = resumo_estoque(products)
    else:
        exits = [m for m in filtered if m.type == MovementType.EXIT]
        consumo = project_consumption(exits, products, categories, period)
        counts = {u: 0 for u in Urgency}
        for e in consumo:
            counts[e.urgency] += 1
        fields["consumption"] = tuple(consumo)
        fields["urgency_counts"] = MappingProxyType(counts)
        fields["total_cost_projection"] = sum(e.cost_projection for e in consumo)

    report = Report(**fields)

    log_report(
        kind.value,
        period.value,
        movements=len(report.movements),
        unresolved=report.totals.unresolved_count,
        consumption_entries=len(report.consumption),
    )
    return report


def relatorio_do_banco(
    kind,
    period,
    product_filter: Optional[Iterable[str]] = None,
    now: Optional[datetime] = None,
    db_path: str = DB_PATH,
) -> Report:
    """Lê o snapshot do SQLite e monta o relatório."""
    try:
        apply_migrations(db_path)
        snap = load_snapshot(db_path)
        return assemble_report(
            kind,
            period,
            product_filter,
            snap.movements,
            snap.products,
            snap.categories,
            now or utc_now(),
        )
    except Exception as e:
        log_system_event("relatorio_do_banco_error", {
            "kind": str(kind),
            "period": str(period),
            "error": str(e),
        }, level="error")
        raise
