from datetime import datetime, timedelta

from controle_estoque.domain.models import Category, Movement, MovementType, Product
from controle_estoque.usecases.alertas import alertas_estoque_baixo
from controle_estoque.usecases.painel import monta_painel

NOW = datetime(2025, 6, 30, 12, 0, 0)

CATS = [Category(id="c1", name="Limpeza"), Category(id="c2", name="Escritório")]
PRODS = [
    Product(id="p1", name="Sabão", category_id="c1", quantity=0, min_stock=5, price=3.0),
    Product(id="p2", name="Papel", category_id="c2", quantity=2, min_stock=8, price=20.0),
    Product(id="p3", name="Caneta", category_id="c2", quantity=50, min_stock=10, price=1.5),
    Product(id="p4", name="Clips", category_id="c2", quantity=1, min_stock=1, price=0.5),
]


def test_alertas_estoque_baixo():
    al = alertas_estoque_baixo(PRODS)

    assert [a.product.id for a in al.sem_estoque] == ["p1"]
    assert [a.product.id for a in al.criticos] == ["p4", "p2"]
    assert al.total == 3
    papel = al.criticos[1]
    assert papel.percentual == 25.0
    assert papel.faltante == 6


def test_sem_alertas():
    assert alertas_estoque_baixo([PRODS[2]]).total == 0


def test_monta_painel():
    movs = [
        Movement(id=f"m{i}", product_id="p3", type=MovementType.EXIT, quantity=1,
                 created_at=NOW - timedelta(days=i))
        for i in range(8)
    ]
    pn = monta_painel(PRODS, CATS, list(reversed(movs)), recentes=3)

    assert pn.total_itens == 53
    assert pn.valor_total == 40.0 + 75.0 + 0.5
    assert (pn.produtos, pn.categorias, pn.estoque_baixo) == (4, 2, 3)
    assert [(c.id, n) for c, n in pn.produtos_por_categoria] == [("c1", 1), ("c2", 3)]
    assert [m.id for m in pn.recentes] == ["m0", "m1", "m2"]
