from datetime import datetime

import pytest

from controle_estoque.domain.models import Movement, MovementType
from controle_estoque.infra.db import connect
from controle_estoque.infra.migrations import apply_migrations, schema_version
from controle_estoque.infra.repositories import (
    CategoryRepo,
    MovementRepo,
    ProductRepo,
    load_snapshot,
)


@pytest.fixture
def db(tmp_path):
    path = str(tmp_path / "estoque.db")
    apply_migrations(path)
    return path


def test_migrations_are_idempotent(db):
    assert schema_version(db) == 2
    apply_migrations(db)
    assert schema_version(db) == 2
    with connect(db) as c:
        cols = [r[1] for r in c.execute("PRAGMA table_info(produto)")]
    assert "criado_em" in cols and "atualizado_em" in cols


def test_category_crud(db):
    repo = CategoryRepo(db)
    cat = repo.insert({"name": "Limpeza", "color": "#10B981"})

    assert repo.get(cat.id).name == "Limpeza"
    assert repo.update(cat.id, name="Higiene").name == "Higiene"
    assert [c.id for c in repo.get_all()] == [cat.id]
    assert repo.delete(cat.id)
    assert repo.get(cat.id) is None
    assert not repo.delete(cat.id)


def test_category_default_color(db):
    cat = CategoryRepo(db).insert({"name": "Sem cor"})
    assert cat.color == "#64748B"


def test_category_with_products_cannot_be_deleted(db):
    cat = CategoryRepo(db).insert({"name": "Limpeza"})
    ProductRepo(db).insert({"name": "Sabão", "category_id": cat.id})
    with pytest.raises(ValueError):
        CategoryRepo(db).delete(cat.id)


def test_product_crud(db):
    cat = CategoryRepo(db).insert({"name": "Escritório"})
    repo = ProductRepo(db)
    p = repo.insert({
        "name": "Papel A4", "category_id": cat.id, "quantity": 10,
        "min_stock": 2, "price": 25.9, "unit": "cx",
    })

    got = repo.get(p.id)
    assert (got.name, got.quantity, got.min_stock, got.price, got.unit) == ("Papel A4", 10, 2, 25.9, "cx")
    assert got.created_at is not None

    upd = repo.update(p.id, price=30.0, quantity=4)
    assert upd.price == 30.0 and upd.quantity == 4
    assert upd.updated_at >= got.updated_at

    with pytest.raises(ValueError):
        repo.update(p.id, cor="azul")

    assert repo.delete(p.id)
    assert repo.get(p.id) is None


def test_movements_survive_product_deletion(db):
    cat = CategoryRepo(db).insert({"name": "Geral"})
    p = ProductRepo(db).insert({"name": "Fita", "category_id": cat.id, "quantity": 1})
    MovementRepo(db).insert(Movement(
        id="m1", product_id=p.id, type=MovementType.ENTRY, quantity=1,
        created_at=datetime(2025, 1, 1, 10, 0, 0), note="compra",
    ))
    ProductRepo(db).delete(p.id)

    snap = load_snapshot(db)
    assert snap.products == ()
    [m] = snap.movements
    assert (m.id, m.product_id, m.quantity, m.note) == ("m1", p.id, 1, "compra")
    assert m.created_at == datetime(2025, 1, 1, 10, 0, 0)


def test_movements_newest_first(db):
    repo = MovementRepo(db)
    repo.insert_many([
        Movement(id="old", product_id="x", type=MovementType.EXIT, quantity=1, created_at=datetime(2025, 1, 1)),
        Movement(id="new", product_id="x", type=MovementType.EXIT, quantity=1, created_at=datetime(2025, 2, 1)),
    ])
    assert [m.id for m in repo.get_all()] == ["new", "old"]
    assert repo.get("old").type == MovementType.EXIT
