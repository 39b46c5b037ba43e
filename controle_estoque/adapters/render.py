# controle_estoque/adapters/render.py
"""
Renderização de relatórios.

- `report_to_dict`: converte um `Report` em estrutura JSON-serializável
  (mesmos dados consumidos pela tela e pelo documento impresso).
- `render_report`: imprime o relatório no terminal com Rich (cabeçalho fixo,
  metadados de período/filtro e tabelas por tipo de relatório).

Movimentações de produtos excluídos aparecem como "Produto removido".
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from controle_estoque.config import DEFAULTS
from controle_estoque.domain.models import (
    CategoryBreakdown,
    ConsumptionEntry,
    MovementLine,
    Report,
    ReportKind,
    Urgency,
)

PRODUTO_REMOVIDO = "Produto removido"

TITULOS = {
    ReportKind.ENTRIES: "Relatório de Entradas",
    ReportKind.EXITS: "Relatório de Saídas",
    ReportKind.GENERAL: "Relatório Geral",
    ReportKind.CONSUMPTION: "Relatório de Consumo",
}

_URGENCIA_LABEL = {
    Urgency.CRITICAL: "[bold red]Crítico[/]",
    Urgency.WARNING: "[bold yellow]Atenção[/]",
    Urgency.OK: "[bold green]OK[/]",
}


# -----------------------
# formatação
# -----------------------

def fmt_num(val: float, casas: int = 2) -> str:
    """1234.5 -> '1.234,50'"""
    return f"{val:,.{casas}f}".replace(",", "X").replace(".", ",").replace("X", ".")


def fmt_moeda(val: float) -> str:
    return f"R$ {fmt_num(val)}"


def fmt_saldo(val: int) -> str:
    return f"+{val}" if val >= 0 else str(val)


# -----------------------
# dict / JSON
# -----------------------

def _ranking_dict(rows) -> List[Dict[str, Any]]:
    return [
        {
            "productId": r.product.id,
            "name": r.product.name,
            "quantity": r.quantity,
            "value": r.value,
            "movementCount": r.movement_count,
        }
        for r in rows
    ]


def _lines_dict(lines) -> List[Dict[str, Any]]:
    return [
        {
            "id": ln.movement.id,
            "productId": ln.movement.product_id,
            "productName": ln.product_name or PRODUTO_REMOVIDO,
            "removed": ln.removed,
            "type": ln.movement.type.value,
            "quantity": ln.movement.quantity,
            "price": float(ln.product.price) if ln.product is not None else None,
            "value": ln.value,
            "note": ln.movement.note,
            "createdAt": ln.movement.created_at.isoformat(),
        }
        for ln in lines
    ]


def _consumption_dict(e: ConsumptionEntry) -> Dict[str, Any]:
    return {
        "productId": e.product_id,
        "name": e.product_name,
        "unit": e.unit,
        "categoryId": e.category.id if e.category else None,
        "categoryName": e.category.name if e.category else None,
        "currentQuantity": e.current_quantity,
        "totalConsumed": e.total_consumed,
        "movementCount": e.movement_count,
        "activeDays": e.active_days,
        "dailyAverage": e.daily_average,
        "monthlyProjection": e.monthly_projection,
        "daysUntilEmpty": e.days_until_empty,
        "costProjection": e.cost_projection,
        "urgency": e.urgency.value,
    }


def _category_dict(c: CategoryBreakdown) -> Dict[str, Any]:
    return {
        "categoryId": c.category.id,
        "name": c.category.name,
        "color": c.category.color,
        "productCount": c.product_count,
        "totalQuantity": c.total_quantity,
        "totalValue": c.total_value,
    }


def report_to_dict(report: Report) -> Dict[str, Any]:
    t = report.totals
    out: Dict[str, Any] = {
        "kind": report.kind.value,
        "period": report.period.value,
        "generatedAt": report.generated_at.isoformat(),
        "productFilter": sorted(report.product_filter),
        "totals": {
            "totalEntryQty": t.total_entry_qty,
            "totalExitQty": t.total_exit_qty,
            "entryValue": t.entry_value,
            "exitValue": t.exit_value,
            "netQuantity": t.net_quantity,
            "netValue": t.net_value,
            "entryCount": t.entry_count,
            "exitCount": t.exit_count,
            "movementCount": t.movement_count,
            "unresolvedCount": t.unresolved_count,
        },
        "categoryBreakdown": [_category_dict(c) for c in report.category_breakdown],
    }
    if report.kind in (ReportKind.ENTRIES, ReportKind.GENERAL):
        out["entryRanking"] = _ranking_dict(report.entry_ranking)
    if report.kind in (ReportKind.EXITS, ReportKind.GENERAL):
        out["exitRanking"] = _ranking_dict(report.exit_ranking)
    if report.kind == ReportKind.ENTRIES:
        out["entries"] = _lines_dict(report.entry_lines)
    if report.kind == ReportKind.EXITS:
        out["exits"] = _lines_dict(report.exit_lines)
    if report.stock is not None:
        s = report.stock
        out["stock"] = {
            "totalValue": s.total_value,
            "productCount": s.product_count,
            "averagePrice": s.average_price,
            "lowStockCount": s.low_stock_count,
            "zeroStockCount": s.zero_stock_count,
        }
    if report.kind == ReportKind.CONSUMPTION:
        out["consumption"] = [_consumption_dict(e) for e in report.consumption]
        out["urgencyCounts"] = {u.value: n for u, n in report.urgency_counts.items()}
        out["totalCostProjection"] = report.total_cost_projection
    return out


# -----------------------
# Rich
# -----------------------

def _ranking_table(title: str, rows, top_n: int, cor: str) -> Table:
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("#", justify="right")
    table.add_column("Produto")
    table.add_column("Quantidade", justify="right", style=cor)
    table.add_column("Valor", justify="right")
    for i, r in enumerate(rows[:top_n], start=1):
        table.add_row(str(i), r.product.name, str(r.quantity), fmt_moeda(r.value))
    return table


def _lines_table(title: str, lines: List[MovementLine]) -> Table:
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Data", justify="center")
    table.add_column("Produto")
    table.add_column("Quantidade", justify="right")
    table.add_column("Preço", justify="right")
    table.add_column("Valor", justify="right")
    table.add_column("Nota")
    for ln in lines:
        nome = ln.product_name if not ln.removed else f"[dim]{PRODUTO_REMOVIDO}[/]"
        preco = fmt_moeda(ln.product.price) if ln.product is not None else "-"
        table.add_row(
            ln.movement.created_at.strftime("%d/%m/%Y %H:%M"),
            nome,
            str(ln.movement.quantity),
            preco,
            fmt_moeda(ln.value),
            ln.movement.note or "",
        )
    return table


def _categorias_table(rows) -> Table:
    table = Table(title="Valor por Categoria", box=box.ROUNDED)
    table.add_column("Categoria")
    table.add_column("Produtos", justify="right")
    table.add_column("Quantidade", justify="right")
    table.add_column("Valor", justify="right")
    for c in rows:
        table.add_row(
            f"[{c.category.color}]■[/] {c.category.name}",
            str(c.product_count),
            str(c.total_quantity),
            fmt_moeda(c.total_value),
        )
    return table


def _consumo_table(rows) -> Table:
    table = Table(title="Projeção de Consumo", box=box.ROUNDED)
    table.add_column("Produto")
    table.add_column("Categoria")
    table.add_column("Estoque", justify="right")
    table.add_column("Consumido", justify="right")
    table.add_column("Média/dia", justify="right")
    table.add_column("Projeção/mês", justify="right")
    table.add_column("Dias p/ zerar", justify="right")
    table.add_column("Custo/mês", justify="right")
    table.add_column("Urgência")
    for e in rows:
        table.add_row(
            e.product_name,
            e.category.name if e.category else "-",
            f"{e.current_quantity} {e.unit}",
            str(e.total_consumed),
            fmt_num(e.daily_average),
            fmt_num(e.monthly_projection, 1),
            str(e.days_until_empty) if e.days_until_empty is not None else "-",
            fmt_moeda(e.cost_projection),
            _URGENCIA_LABEL[e.urgency],
        )
    return table


def render_report(report: Report, console: Optional[Console] = None, top_n: int = DEFAULTS.top_n) -> None:
    console = console or Console()
    t = report.totals

    meta = [
        f"Período: {report.period.label}",
        f"Gerado em: {report.generated_at.strftime('%d/%m/%Y %H:%M')}",
    ]
    if report.product_filter:
        meta.append(f"Produtos filtrados: {len(report.product_filter)}")
    console.print(Panel("\n".join(meta), title=TITULOS[report.kind], border_style="cyan"))

    resumo = Table(title="Resumo de Movimentações", box=box.SIMPLE)
    resumo.add_column("Entradas", justify="right")
    resumo.add_column("Saídas", justify="right")
    resumo.add_column("Total Movim.", justify="right")
    resumo.add_column("Saldo Líquido", justify="right")
    resumo.add_row(
        f"{t.total_entry_qty}\n{fmt_moeda(t.entry_value)}",
        f"{t.total_exit_qty}\n{fmt_moeda(t.exit_value)}",
        f"{t.movement_count}\n{t.entry_count} ent. / {t.exit_count} saí.",
        f"{fmt_saldo(t.net_quantity)}\n{fmt_moeda(t.net_value)}",
    )
    console.print(resumo)

    if report.kind == ReportKind.ENTRIES:
        if report.entry_ranking:
            console.print(_ranking_table("Mais Entradas", report.entry_ranking, top_n, "green"))
        if report.entry_lines:
            console.print(_lines_table("Entradas no Período", list(report.entry_lines)))
    elif report.kind == ReportKind.EXITS:
        if report.exit_ranking:
            console.print(_ranking_table("Mais Saídas", report.exit_ranking, top_n, "red"))
        if report.exit_lines:
            console.print(_lines_table("Saídas no Período", list(report.exit_lines)))
    elif report.kind == ReportKind.GENERAL:
        if report.entry_ranking:
            console.print(_ranking_table("Mais Entradas", report.entry_ranking, top_n, "green"))
        if report.exit_ranking:
            console.print(_ranking_table("Mais Saídas", report.exit_ranking, top_n, "red"))
        s = report.stock
        if s is not None:
            visao = Table(title="Visão Geral do Estoque", box=box.ROUNDED, show_header=False)
            visao.add_column("Campo")
            visao.add_column("Valor", justify="right")
            visao.add_row("Valor total em estoque", fmt_moeda(s.total_value))
            visao.add_row("Total de produtos", str(s.product_count))
            visao.add_row("Preço médio", fmt_moeda(s.average_price))
            visao.add_row("Estoque baixo", f"[yellow]{s.low_stock_count}[/]" if s.low_stock_count else "0")
            visao.add_row("Sem estoque", f"[red]{s.zero_stock_count}[/]" if s.zero_stock_count else "0")
            console.print(visao)
    else:
        if report.consumption:
            console.print(_consumo_table(report.consumption))
        c = report.urgency_counts
        console.print(
            f"Crítico: {c.get(Urgency.CRITICAL, 0)}  "
            f"Atenção: {c.get(Urgency.WARNING, 0)}  "
            f"OK: {c.get(Urgency.OK, 0)}  "
            f"Custo mensal projetado: {fmt_moeda(report.total_cost_projection)}"
        )

    if report.category_breakdown:
        console.print(_categorias_table(report.category_breakdown))

    if report.is_empty:
        console.print(Panel(
            "Registre movimentações para ver os relatórios",
            title="Sem dados no período",
            border_style="yellow",
        ))
