# controle_estoque/adapters/cli.py
"""
CLI do controle de estoque (Typer).

Comandos principais:
- migrate                         -> aplica migrações
- categoria add/list/rm           -> cadastro de categorias
- produto add/list/edit/rm        -> cadastro de produtos
- movimento registrar/list        -> entradas e saídas (ajusta o estoque)
- rel entradas|saidas|geral|consumo -> relatórios por período
- alertas                         -> produtos com estoque baixo
- painel                          -> números gerais e últimas movimentações
- backup exportar/importar        -> backup completo em JSON
- importar produtos|movimentos    -> planilhas XLSX
- logs                            -> últimas linhas de um log
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from controle_estoque.adapters.backup import BackupError, exportar_backup, importar_backup
from controle_estoque.adapters.parsers import parse_price, parse_timestamp
from controle_estoque.adapters.render import (
    PRODUTO_REMOVIDO, fmt_moeda, render_report, report_to_dict
)
from controle_estoque.config import DB_PATH, DEFAULTS
from controle_estoque.domain.models import MovementType, ReportContractError, ReportKind
from controle_estoque.infra.logger import LOG_FILES, get_log_summary
from controle_estoque.infra.migrations import apply_migrations
from controle_estoque.infra.repositories import (
    CategoryRepo, MovementRepo, ProductRepo, load_snapshot
)
from controle_estoque.usecases.alertas import alertas_estoque_baixo
from controle_estoque.usecases.importar_planilha import (
    run_importar_movimentos, run_importar_produtos
)
from controle_estoque.usecases.painel import monta_painel
from controle_estoque.usecases.registrar_movimento import MovementError, registrar_movimento
from controle_estoque.usecases.relatorios import relatorio_do_banco


app = typer.Typer(help="Controle de Estoque (CLI)")
console = Console()

DbOption = typer.Option(DB_PATH, "--db", help="Caminho do SQLite")


# -----------------------
# util
# -----------------------

def _print_json(obj) -> None:
    typer.echo(json.dumps(obj, ensure_ascii=False, indent=2))


def _erro(msg: str) -> None:
    console.print(f"[bold red]Erro:[/] {msg}")
    raise typer.Exit(code=1)


def _display_lote(data: Dict[str, Any]) -> None:
    """Resumo de operações em lote (importações)."""
    panel_content = [
        f"Total de registros: {data['total']}",
        f"Processados com sucesso: {data.get('sucessos', 0)}",
    ]
    if data.get("erros"):
        panel_content.append(f"Erros: {len(data['erros'])}")
    console.print(Panel("\n".join(panel_content), title=f"{data.get('tipo', 'Registros')} em Lote"))

    if data.get("erros"):
        erro_table = Table(title="Erros Encontrados")
        erro_table.add_column("Linha")
        erro_table.add_column("Erro")
        for erro in data["erros"]:
            erro_table.add_row(str(erro.get("linha", "?")), erro.get("mensagem", "Erro desconhecido"))
        console.print(erro_table)


# -----------------------
# comandos de infra
# -----------------------

@app.command("migrate")
def cmd_migrate(db_path: str = DbOption):
    """Aplica migrações do banco."""
    apply_migrations(db_path)
    typer.echo(f">> Migrações aplicadas em: {db_path}")


@app.command("logs")
def cmd_logs(
    tipo: str = typer.Argument("system", help=" | ".join(LOG_FILES)),
    linhas: int = typer.Option(50, help="Quantidade de linhas"),
):
    """Mostra as últimas linhas de um log."""
    typer.echo(get_log_summary(tipo, lines=linhas))


# -----------------------
# catálogo
# -----------------------

cat_app = typer.Typer(help="Cadastro de categorias.")
app.add_typer(cat_app, name="categoria")


@cat_app.command("add")
def cmd_categoria_add(
    nome: str = typer.Argument(..., help="Nome da categoria"),
    cor: str = typer.Option("#64748B", help="Cor (hex)"),
    db_path: str = DbOption,
):
    apply_migrations(db_path)
    cat = CategoryRepo(db_path).insert({"name": nome, "color": cor})
    typer.echo(cat.id)


@cat_app.command("list")
def cmd_categoria_list(db_path: str = DbOption):
    apply_migrations(db_path)
    cats = CategoryRepo(db_path).get_all()
    table = Table(title="Categorias", box=box.ROUNDED)
    table.add_column("ID")
    table.add_column("Nome")
    table.add_column("Cor")
    for c in cats:
        table.add_row(c.id, c.name, f"[{c.color}]■[/] {c.color}")
    console.print(table)


@cat_app.command("rm")
def cmd_categoria_rm(category_id: str = typer.Argument(...), db_path: str = DbOption):
    apply_migrations(db_path)
    try:
        ok = CategoryRepo(db_path).delete(category_id)
    except ValueError as e:
        _erro(str(e))
    if not ok:
        _erro(f"categoria não encontrada: {category_id}")
    typer.echo(">> Categoria excluída.")


prod_app = typer.Typer(help="Cadastro de produtos.")
app.add_typer(prod_app, name="produto")


@prod_app.command("add")
def cmd_produto_add(
    nome: str = typer.Argument(..., help="Nome do produto"),
    categoria: str = typer.Option(..., help="ID da categoria"),
    quantidade: int = typer.Option(0, min=0),
    minimo: int = typer.Option(0, min=0, help="Estoque mínimo"),
    preco: str = typer.Option("0", help="Preço unitário (ex.: 12,50)"),
    unidade: str = typer.Option("un"),
    db_path: str = DbOption,
):
    apply_migrations(db_path)
    if CategoryRepo(db_path).get(categoria) is None:
        _erro(f"categoria não encontrada: {categoria}")
    valor = parse_price(preco)
    if valor is None or valor < 0:
        _erro(f"preço inválido: {preco}")
    p = ProductRepo(db_path).insert({
        "name": nome, "category_id": categoria, "quantity": quantidade,
        "min_stock": minimo, "price": valor, "unit": unidade,
    })
    typer.echo(p.id)


@prod_app.command("edit")
def cmd_produto_edit(
    product_id: str = typer.Argument(...),
    nome: Optional[str] = typer.Option(None),
    categoria: Optional[str] = typer.Option(None, help="ID da categoria"),
    quantidade: Optional[int] = typer.Option(None, min=0),
    minimo: Optional[int] = typer.Option(None, min=0),
    preco: Optional[str] = typer.Option(None),
    unidade: Optional[str] = typer.Option(None),
    db_path: str = DbOption,
):
    """Altera apenas os campos informados."""
    apply_migrations(db_path)
    changes: Dict[str, Any] = {}
    if nome is not None:
        changes["name"] = nome
    if categoria is not None:
        if CategoryRepo(db_path).get(categoria) is None:
            _erro(f"categoria não encontrada: {categoria}")
        changes["category_id"] = categoria
    if quantidade is not None:
        changes["quantity"] = quantidade
    if minimo is not None:
        changes["min_stock"] = minimo
    if preco is not None:
        valor = parse_price(preco)
        if valor is None or valor < 0:
            _erro(f"preço inválido: {preco}")
        changes["price"] = valor
    if unidade is not None:
        changes["unit"] = unidade
    if not changes:
        typer.echo("Nada a alterar. Informe pelo menos um campo.")
        raise typer.Exit(code=1)
    p = ProductRepo(db_path).update(product_id, **changes)
    if p is None:
        _erro(f"produto não encontrado: {product_id}")
    typer.echo(">> Produto atualizado.")


@prod_app.command("list")
def cmd_produto_list(db_path: str = DbOption):
    apply_migrations(db_path)
    snap = load_snapshot(db_path)
    cats = {c.id: c for c in snap.categories}
    table = Table(title="Produtos", box=box.ROUNDED)
    table.add_column("ID")
    table.add_column("Nome")
    table.add_column("Categoria")
    table.add_column("Estoque", justify="right")
    table.add_column("Mínimo", justify="right")
    table.add_column("Preço", justify="right")
    for p in snap.products:
        cat = cats.get(p.category_id)
        estoque = f"{p.quantity} {p.unit}"
        if p.quantity <= p.min_stock:
            estoque = f"[bold yellow]{estoque}[/]"
        table.add_row(p.id, p.name, cat.name if cat else "-", estoque, str(p.min_stock), fmt_moeda(p.price))
    console.print(table)


@prod_app.command("rm")
def cmd_produto_rm(product_id: str = typer.Argument(...), db_path: str = DbOption):
    """Exclui o produto; o histórico de movimentações é mantido."""
    apply_migrations(db_path)
    if not ProductRepo(db_path).delete(product_id):
        _erro(f"produto não encontrado: {product_id}")
    typer.echo(">> Produto excluído.")


# -----------------------
# movimentações
# -----------------------

mov_app = typer.Typer(help="Entradas e saídas de estoque.")
app.add_typer(mov_app, name="movimento")

_TIPOS = {"entrada": MovementType.ENTRY, "saida": MovementType.EXIT}


@mov_app.command("registrar")
def cmd_movimento_registrar(
    product_id: str = typer.Argument(..., help="ID do produto"),
    tipo: str = typer.Option(..., help="entrada | saida"),
    quantidade: int = typer.Option(..., help="Quantidade (inteiro > 0)"),
    nota: Optional[str] = typer.Option(None, help="Observação"),
    data: Optional[str] = typer.Option(None, help="Data/hora ISO (padrão: agora)"),
    db_path: str = DbOption,
):
    apply_migrations(db_path)
    if tipo.lower() not in _TIPOS:
        _erro("tipo deve ser 'entrada' ou 'saida'")
    criado_em = None
    if data:
        criado_em = parse_timestamp(data)
        if criado_em is None:
            _erro(f"data inválida: {data}")
    try:
        mov = registrar_movimento(
            product_id, _TIPOS[tipo.lower()], quantidade,
            nota=nota, criado_em=criado_em, db_path=db_path,
        )
    except MovementError as e:
        _erro(str(e))
    typer.echo(mov.id)


@mov_app.command("list")
def cmd_movimento_list(
    limite: int = typer.Option(20, help="Quantidade de movimentações"),
    db_path: str = DbOption,
):
    apply_migrations(db_path)
    movs = MovementRepo(db_path).get_all()[: max(0, limite)]
    nomes = {p.id: p.name for p in ProductRepo(db_path).get_all()}
    table = Table(title="Movimentações", box=box.ROUNDED)
    table.add_column("Data", justify="center")
    table.add_column("Produto")
    table.add_column("Tipo")
    table.add_column("Quantidade", justify="right")
    table.add_column("Nota")
    for m in movs:
        sinal = "[green]+[/]" if m.is_entry else "[red]-[/]"
        table.add_row(
            m.created_at.strftime("%d/%m/%Y %H:%M"),
            nomes.get(m.product_id, f"[dim]{PRODUTO_REMOVIDO}[/]"),
            "Entrada" if m.is_entry else "Saída",
            f"{sinal}{m.quantity}",
            m.note or "",
        )
    console.print(table)


# -----------------------
# relatórios
# -----------------------

rel_app = typer.Typer(help="Relatórios por período (7d | 30d | 90d | all).")
app.add_typer(rel_app, name="rel")


def _run_rel(kind: ReportKind, periodo: str, produtos: Optional[List[str]], top_n: int, as_json: bool, db_path: str) -> None:
    try:
        report = relatorio_do_banco(kind, periodo, produtos or None, db_path=db_path)
    except ReportContractError as e:
        _erro(str(e))
    if as_json:
        _print_json(report_to_dict(report))
    else:
        render_report(report, console=console, top_n=top_n)


def _rel_command(kind: ReportKind, name: str, doc: str):
    def cmd(
        periodo: str = typer.Option(DEFAULTS.periodo, "--periodo", "-p", help="7d | 30d | 90d | all"),
        produto: Optional[List[str]] = typer.Option(None, "--produto", help="Restringe a um ou mais produtos (repetível)"),
        top_n: int = typer.Option(DEFAULTS.top_n, "--top", help="Tamanho dos rankings"),
        as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
        db_path: str = DbOption,
    ):
        _run_rel(kind, periodo, produto, top_n, as_json, db_path)

    cmd.__doc__ = doc
    rel_app.command(name)(cmd)


_rel_command(ReportKind.ENTRIES, "entradas", "Entradas do período: ranking e lista de movimentações.")
_rel_command(ReportKind.EXITS, "saidas", "Saídas do período: ranking e lista de movimentações.")
_rel_command(ReportKind.GENERAL, "geral", "Totais, rankings, valor por categoria e visão do estoque.")
_rel_command(ReportKind.CONSUMPTION, "consumo", "Projeção de consumo, dias até zerar e urgência.")


@app.command("alertas")
def cmd_alertas(db_path: str = DbOption):
    """Produtos no estoque mínimo ou abaixo dele."""
    apply_migrations(db_path)
    alertas = alertas_estoque_baixo(ProductRepo(db_path).get_all())
    if not alertas.total:
        console.print(Panel("Todos os produtos estão acima do mínimo.", title="Alertas", border_style="green"))
        return
    for titulo, itens, cor in (
        ("Sem Estoque", alertas.sem_estoque, "red"),
        ("Estoque Crítico", alertas.criticos, "yellow"),
    ):
        if not itens:
            continue
        table = Table(title=titulo, box=box.ROUNDED, border_style=cor)
        table.add_column("Produto")
        table.add_column("Estoque", justify="right")
        table.add_column("Mínimo", justify="right")
        table.add_column("% do mínimo", justify="right")
        table.add_column("Faltante", justify="right")
        for a in itens:
            p = a.product
            table.add_row(p.name, f"{p.quantity} {p.unit}", f"{p.min_stock} {p.unit}", f"{a.percentual:.0f}%", str(a.faltante))
        console.print(table)


@app.command("painel")
def cmd_painel(db_path: str = DbOption):
    """Números gerais do estoque e últimas movimentações."""
    apply_migrations(db_path)
    snap = load_snapshot(db_path)
    pn = monta_painel(snap.products, snap.categories, snap.movements)
    console.print(Panel(
        "\n".join([
            f"Itens em estoque: {pn.total_itens}",
            f"Valor total: {fmt_moeda(pn.valor_total)}",
            f"Produtos: {pn.produtos}  Categorias: {pn.categorias}",
            f"Estoque baixo: {pn.estoque_baixo}",
        ]),
        title="Painel",
        border_style="cyan",
    ))
    nomes = {p.id: p.name for p in snap.products}
    table = Table(title="Movimentações Recentes", box=box.ROUNDED)
    table.add_column("Data", justify="center")
    table.add_column("Produto")
    table.add_column("Quantidade", justify="right")
    for m in pn.recentes:
        sinal = "+" if m.is_entry else "-"
        table.add_row(
            m.created_at.strftime("%d/%m/%Y %H:%M"),
            nomes.get(m.product_id, PRODUTO_REMOVIDO),
            f"{sinal}{m.quantity}",
        )
    console.print(table)


# -----------------------
# backup e importação
# -----------------------

backup_app = typer.Typer(help="Backup completo em JSON.")
app.add_typer(backup_app, name="backup")


@backup_app.command("exportar")
def cmd_backup_exportar(path: str = typer.Argument(...), db_path: str = DbOption):
    apply_migrations(db_path)
    info = exportar_backup(path, db_path=db_path)
    typer.echo(
        f">> Backup salvo em {info['arquivo']}: {info['categorias']} categorias, "
        f"{info['produtos']} produtos, {info['movimentos']} movimentações."
    )


@backup_app.command("importar")
def cmd_backup_importar(path: str = typer.Argument(...), db_path: str = DbOption):
    try:
        info = importar_backup(path, db_path=db_path)
    except BackupError as e:
        _erro(str(e))
    typer.echo(
        f">> Importados: {info['categorias']} categorias, {info['produtos']} produtos, "
        f"{info['movimentos']} movimentações ({info['ignorados']} já existentes)."
    )


imp_app = typer.Typer(help="Importação de planilhas XLSX.")
app.add_typer(imp_app, name="importar")


@imp_app.command("produtos")
def cmd_importar_produtos(path: str = typer.Argument(..., help="XLSX de PRODUTOS"), db_path: str = DbOption):
    _display_lote(run_importar_produtos(path, db_path=db_path))


@imp_app.command("movimentos")
def cmd_importar_movimentos(path: str = typer.Argument(..., help="XLSX de MOVIMENTAÇÕES"), db_path: str = DbOption):
    _display_lote(run_importar_movimentos(path, db_path=db_path))


# Entry point opcional:
def main():
    app()


if __name__ == "__main__":
    main()
