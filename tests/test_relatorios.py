from datetime import datetime, timedelta

import pytest

from controle_estoque.domain.models import (
    Category,
    Movement,
    MovementType,
    Period,
    Product,
    ReportContractError,
    ReportKind,
    Urgency,
)
from controle_estoque.infra.migrations import apply_migrations
from controle_estoque.infra.repositories import CategoryRepo, MovementRepo, ProductRepo
from controle_estoque.usecases.relatorios import assemble_report, relatorio_do_banco, resumo_estoque

NOW = datetime(2025, 6, 30, 12, 0, 0)

CATS = [Category(id="c1", name="Limpeza"), Category(id="c2", name="Escritório")]

PRODS = [
    Product(id="A", name="Detergente", category_id="c1", quantity=5, min_stock=5, price=10.0),
    Product(id="B", name="Papel A4", category_id="c2", quantity=3, min_stock=1, price=20.0),
    Product(id="C", name="Caneta", category_id="c2", quantity=0, min_stock=2, price=15.0),
]


def _mov(mid, pid, tipo, qty, days_ago):
    return Movement(
        id=mid,
        product_id=pid,
        type=MovementType(tipo),
        quantity=qty,
        created_at=NOW - timedelta(days=days_ago),
    )


MOVS = [
    _mov("m1", "A", "entry", 10, 2),
    _mov("m2", "B", "entry", 4, 3),
    _mov("m3", "A", "exit", 5, 1),
    _mov("m4", "B", "exit", 1, 5),
    _mov("m5", "C", "exit", 2, 20),
    _mov("m6", "A", "entry", 7, 40),
    _mov("m7", "sumiu", "exit", 3, 1),
]


def test_general_report_stock_summary():
    rep = assemble_report(ReportKind.GENERAL, Period.ALL, None, MOVS, PRODS, CATS, NOW)
    s = rep.stock

    assert s.total_value == pytest.approx(110.0)
    assert s.product_count == 3
    assert s.average_price == pytest.approx(15.0)
    assert s.low_stock_count == 2
    assert s.zero_stock_count == 1
    assert rep.entry_ranking and rep.exit_ranking
    assert rep.consumption == ()


def test_entries_report_with_product_filter():
    rep = assemble_report("entries", "7d", {"A"}, MOVS, PRODS, CATS, NOW)

    assert [m.id for m in rep.movements] == ["m1", "m3"]
    assert [ln.movement.id for ln in rep.entry_lines] == ["m1"]
    assert rep.entry_lines[0].value == pytest.approx(100.0)
    assert [r.product.id for r in rep.entry_ranking] == ["A"]
    assert rep.exit_lines == ()
    assert rep.totals.total_entry_qty == 10
    assert rep.totals.total_exit_qty == 5
    assert rep.product_filter == frozenset({"A"})
    # composição por categoria continua com o catálogo inteiro
    assert {c.category.id for c in rep.category_breakdown} == {"c1", "c2"}


def test_exits_report_marks_removed_products():
    rep = assemble_report(ReportKind.EXITS, Period.LAST_7_DAYS, None, MOVS, PRODS, CATS, NOW)

    linhas = {ln.movement.id: ln for ln in rep.exit_lines}
    assert set(linhas) == {"m3", "m4", "m7"}
    assert linhas["m7"].removed
    assert linhas["m7"].product_name is None
    assert linhas["m7"].value == 0.0
    assert not linhas["m3"].removed
    assert rep.totals.unresolved_count == 1
    assert [r.product.id for r in rep.exit_ranking] == ["A", "B"]


def test_consumption_report_counts_and_cost():
    rep = assemble_report(ReportKind.CONSUMPTION, Period.LAST_30_DAYS, None, MOVS, PRODS, CATS, NOW)

    assert [e.product_id for e in rep.consumption] == ["A", "C", "B"]
    assert set(rep.urgency_counts) == set(Urgency)
    assert sum(rep.urgency_counts.values()) == len(rep.consumption)
    assert rep.total_cost_projection == pytest.approx(sum(e.cost_projection for e in rep.consumption))
    a = rep.consumption[0]
    # 5 unidades em 30 dias, 5 em estoque: 30 dias até zerar
    assert a.days_until_empty == 30
    assert a.urgency == Urgency.WARNING


def test_empty_history_gives_well_formed_report():
    for kind in ReportKind:
        rep = assemble_report(kind, Period.LAST_7_DAYS, None, [], PRODS, CATS, NOW)
        assert rep.is_empty
        assert rep.totals.movement_count == 0
        assert rep.entry_ranking == () and rep.exit_ranking == ()
        assert rep.consumption == ()
        assert rep.total_cost_projection == 0


def test_empty_catalog():
    rep = assemble_report(ReportKind.GENERAL, Period.ALL, None, [], [], [], NOW)
    assert rep.stock.product_count == 0
    assert rep.stock.average_price == 0
    assert rep.category_breakdown == ()


def test_filter_matching_nothing():
    rep = assemble_report(ReportKind.GENERAL, Period.ALL, ["nao-existe"], MOVS, PRODS, CATS, NOW)
    assert rep.is_empty
    assert rep.totals.net_quantity == 0


@pytest.mark.parametrize(
    "kind,period,filtro",
    [
        ("mensal", Period.ALL, None),
        (ReportKind.GENERAL, "1y", None),
        (ReportKind.GENERAL, Period.ALL, "A"),
        (ReportKind.GENERAL, Period.ALL, ["A", 3]),
    ],
)
def test_contract_errors(kind, period, filtro):
    with pytest.raises(ReportContractError):
        assemble_report(kind, period, filtro, MOVS, PRODS, CATS, NOW)


def test_contract_error_is_value_error():
    with pytest.raises(ValueError):
        assemble_report("x", "7d", None, [], [], [], NOW)


def test_inputs_are_not_mutated_and_result_is_deterministic():
    movs, prods, cats = list(MOVS), list(PRODS), list(CATS)
    r1 = assemble_report(ReportKind.CONSUMPTION, Period.ALL, None, movs, prods, cats, NOW)
    r2 = assemble_report(ReportKind.CONSUMPTION, Period.ALL, None, movs, prods, cats, NOW)

    assert movs == MOVS and prods == PRODS and cats == CATS
    assert r1 == r2


def test_resumo_estoque_vazio():
    s = resumo_estoque([])
    assert (s.total_value, s.product_count, s.low_stock_count) == (0.0, 0, 0)


def test_relatorio_do_banco(tmp_path):
    db = str(tmp_path / "estoque.db")
    apply_migrations(db)
    cat = CategoryRepo(db).insert({"name": "Limpeza"})
    p = ProductRepo(db).insert({"name": "Sabão", "category_id": cat.id, "quantity": 20, "price": 3.0})
    MovementRepo(db).insert_many([
        Movement(id="x1", product_id=p.id, type=MovementType.EXIT, quantity=6, created_at=NOW - timedelta(days=2)),
        Movement(id="x2", product_id=p.id, type=MovementType.EXIT, quantity=8, created_at=NOW - timedelta(days=60)),
    ])

    rep = relatorio_do_banco("consumption", "30d", now=NOW, db_path=db)

    [e] = rep.consumption
    assert e.total_consumed == 6
    assert e.product_name == "Sabão"
    assert e.category.name == "Limpeza"
    assert rep.generated_at == NOW


def test_relatorio_do_banco_invalid_kind(tmp_path):
    with pytest.raises(ReportContractError):
        relatorio_do_banco("semanal", "7d", db_path=str(tmp_path / "e.db"))


def test_category_of_deleted_products_is_left_out():
    cats = CATS + [Category(id="c3", name="Descontinuados")]
    # "velho" pertencia à categoria c3 e foi excluído do catálogo
    historico = MOVS + [
        _mov("v1", "velho", "entry", 12, 10),
        _mov("v2", "velho", "exit", 4, 6),
    ]
    for kind in ReportKind:
        rep = assemble_report(kind, Period.LAST_30_DAYS, None, historico, PRODS, cats, NOW)

        assert "c3" not in {c.category.id for c in rep.category_breakdown}
        # m7 (produto "sumiu") mais as duas de "velho"
        assert rep.totals.unresolved_count == 3
        assert rep.totals.total_entry_qty == 14
        assert rep.totals.entry_count == 3


def test_urgency_counts_is_read_only():
    rep = assemble_report(ReportKind.CONSUMPTION, Period.LAST_30_DAYS, None, MOVS, PRODS, CATS, NOW)
    with pytest.raises(TypeError):
        rep.urgency_counts[Urgency.OK] = 99
    assert dict(rep.urgency_counts) == {Urgency.CRITICAL: 1, Urgency.WARNING: 1, Urgency.OK: 1}

    vazio = assemble_report(ReportKind.GENERAL, Period.ALL, None, [], [], [], NOW)
    with pytest.raises(TypeError):
        vazio.urgency_counts[Urgency.OK] = 1
