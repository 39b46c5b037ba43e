# controle_estoque/infra/repositories.py
"""
Repositórios (DAO) para acesso e manipulação de dados no SQLite.

Classes:
- CategoryRepo
- ProductRepo
- MovementRepo

Cada repositório expõe o contrato simples do catálogo: listar, obter por
id, inserir, atualizar e excluir (movimentações não são atualizadas nem
excluídas). As linhas são devolvidas como dataclasses do domínio.

`load_snapshot` lê as três tabelas numa mesma conexão e devolve o
`Snapshot` consumido pelo motor de relatórios.
"""

from __future__ import annotations

import sqlite3
import uuid
from dataclasses import asdict, is_dataclass
from typing import Any, Dict, Iterable, List, Optional

from .db import connect
from controle_estoque.adapters.parsers import format_timestamp, parse_timestamp, utc_now
from controle_estoque.domain.models import (
    Category,
    Movement,
    MovementType,
    Product,
    Snapshot,
)


# -------------------------
# Helpers
# -------------------------

def _as_dict(row: Any) -> Dict[str, Any]:
    if isinstance(row, dict):
        return dict(row)
    if is_dataclass(row):
        return asdict(row)
    raise TypeError("row must be dict or dataclass")


def new_id() -> str:
    return str(uuid.uuid4())


# -------------------------
# Conversão linha <-> dataclass
# -------------------------

def category_from_row(r: sqlite3.Row) -> Category:
    return Category(id=r["id"], name=r["nome"], color=r["cor"])


def product_from_row(r: sqlite3.Row) -> Product:
    return Product(
        id=r["id"],
        name=r["nome"],
        category_id=r["categoria_id"],
        quantity=int(r["quantidade"]),
        min_stock=int(r["estoque_minimo"]),
        price=float(r["preco"]),
        unit=r["unidade"],
        created_at=parse_timestamp(r["criado_em"]),
        updated_at=parse_timestamp(r["atualizado_em"]),
    )


def movement_from_row(r: sqlite3.Row) -> Movement:
    return Movement(
        id=r["id"],
        product_id=r["produto_id"],
        type=MovementType(r["tipo"]),
        quantity=int(r["quantidade"]),
        note=r["nota"],
        created_at=parse_timestamp(r["criado_em"]),
    )


_PRODUCT_COLUMNS = {
    "name": "nome",
    "category_id": "categoria_id",
    "quantity": "quantidade",
    "min_stock": "estoque_minimo",
    "price": "preco",
    "unit": "unidade",
}

_CATEGORY_COLUMNS = {"name": "nome", "color": "cor"}


def _update(conn, table: str, columns: Dict[str, str], id_: str, changes: Dict[str, Any], extra: Optional[Dict[str, Any]] = None) -> int:
    unknown = set(changes) - set(columns)
    if unknown:
        raise ValueError(f"campos desconhecidos para {table}: {sorted(unknown)}")
    payload = {columns[k]: v for k, v in changes.items()}
    payload.update(extra or {})
    if not payload:
        return 0
    sets = ", ".join(f"{col} = :{col}" for col in payload)
    payload["id"] = id_
    cur = conn.execute(f"UPDATE {table} SET {sets} WHERE id = :id", payload)
    return cur.rowcount


# -------------------------
# Categoria
# -------------------------

def insert_category(conn, cat: Category) -> None:
    """INSERT numa conexão já aberta (usado dentro de transações maiores)."""
    conn.execute(
        "INSERT INTO categoria (id, nome, cor) VALUES (?, ?, ?)",
        (cat.id, cat.name, cat.color),
    )


class CategoryRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def get_all(self) -> List[Category]:
        with connect(self.db_path) as c:
            cur = c.execute("SELECT id, nome, cor FROM categoria ORDER BY rowid")
            return [category_from_row(r) for r in cur.fetchall()]

    def get(self, category_id: str) -> Optional[Category]:
        with connect(self.db_path) as c:
            r = c.execute("SELECT id, nome, cor FROM categoria WHERE id = ?", (category_id,)).fetchone()
            return category_from_row(r) if r else None

    def insert(self, row: Any) -> Category:
        r = _as_dict(row)
        cat = Category(id=r.get("id") or new_id(), name=r["name"], color=r.get("color") or Category.color)
        with connect(self.db_path) as c:
            insert_category(c, cat)
        return cat

    def update(self, category_id: str, **changes) -> Optional[Category]:
        with connect(self.db_path) as c:
            _update(c, "categoria", _CATEGORY_COLUMNS, category_id, changes)
        return self.get(category_id)

    def delete(self, category_id: str) -> bool:
        """Exclui a categoria; recusa se ainda houver produtos associados."""
        with connect(self.db_path) as c:
            n = c.execute("SELECT COUNT(*) FROM produto WHERE categoria_id = ?", (category_id,)).fetchone()[0]
            if n:
                raise ValueError(f"categoria {category_id} possui {n} produto(s) associado(s)")
            cur = c.execute("DELETE FROM categoria WHERE id = ?", (category_id,))
            return cur.rowcount > 0


# -------------------------
# Produto
# -------------------------

_PRODUCT_SELECT = """
    SELECT id, nome, categoria_id, quantidade, estoque_minimo, preco, unidade,
           criado_em, atualizado_em
    FROM produto
"""


def insert_product(conn, p: Product) -> None:
    """INSERT numa conexão já aberta; carimbos ausentes recebem o instante atual."""
    agora = utc_now()
    conn.execute(
        """
        INSERT INTO produto
            (id, nome, categoria_id, quantidade, estoque_minimo, preco, unidade,
             criado_em, atualizado_em)
        VALUES
            (:id, :nome, :categoria_id, :quantidade, :estoque_minimo, :preco, :unidade,
             :criado_em, :atualizado_em)
        """,
        {
            "id": p.id,
            "nome": p.name,
            "categoria_id": p.category_id,
            "quantidade": p.quantity,
            "estoque_minimo": p.min_stock,
            "preco": p.price,
            "unidade": p.unit,
            "criado_em": format_timestamp(p.created_at or agora),
            "atualizado_em": format_timestamp(p.updated_at or agora),
        },
    )


class ProductRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def get_all(self) -> List[Product]:
        with connect(self.db_path) as c:
            cur = c.execute(_PRODUCT_SELECT + " ORDER BY rowid")
            return [product_from_row(r) for r in cur.fetchall()]

    def get(self, product_id: str) -> Optional[Product]:
        with connect(self.db_path) as c:
            r = c.execute(_PRODUCT_SELECT + " WHERE id = ?", (product_id,)).fetchone()
            return product_from_row(r) if r else None

    def insert(self, row: Any) -> Product:
        r = _as_dict(row)
        agora = utc_now()
        p = Product(
            id=r.get("id") or new_id(),
            name=r["name"],
            category_id=r["category_id"],
            quantity=int(r.get("quantity") or 0),
            min_stock=int(r.get("min_stock") or 0),
            price=float(r.get("price") or 0.0),
            unit=r.get("unit") or "un",
            created_at=r.get("created_at") or agora,
            updated_at=r.get("updated_at") or agora,
        )
        with connect(self.db_path) as c:
            insert_product(c, p)
        return p

    def update(self, product_id: str, **changes) -> Optional[Product]:
        with connect(self.db_path) as c:
            _update(
                c, "produto", _PRODUCT_COLUMNS, product_id, changes,
                extra={"atualizado_em": format_timestamp(utc_now())},
            )
        return self.get(product_id)

    def delete(self, product_id: str) -> bool:
        """Exclui o produto. As movimentações dele permanecem no histórico."""
        with connect(self.db_path) as c:
            cur = c.execute("DELETE FROM produto WHERE id = ?", (product_id,))
            return cur.rowcount > 0


# -------------------------
# Movimentação
# -------------------------

_MOVEMENT_SELECT = "SELECT id, produto_id, tipo, quantidade, nota, criado_em FROM movimento"


def insert_movement(conn, m: Movement) -> None:
    """INSERT numa conexão já aberta (usado dentro de transações maiores)."""
    conn.execute(
        """
        INSERT INTO movimento (id, produto_id, tipo, quantidade, nota, criado_em)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (m.id, m.product_id, m.type.value, m.quantity, m.note, format_timestamp(m.created_at)),
    )


class MovementRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def get_all(self) -> List[Movement]:
        """Todas as movimentações, mais recentes primeiro."""
        with connect(self.db_path) as c:
            cur = c.execute(_MOVEMENT_SELECT + " ORDER BY criado_em DESC, rowid DESC")
            return [movement_from_row(r) for r in cur.fetchall()]

    def get(self, movement_id: str) -> Optional[Movement]:
        with connect(self.db_path) as c:
            r = c.execute(_MOVEMENT_SELECT + " WHERE id = ?", (movement_id,)).fetchone()
            return movement_from_row(r) if r else None

    def insert(self, m: Movement) -> Movement:
        with connect(self.db_path) as c:
            insert_movement(c, m)
        return m

    def insert_many(self, movements: Iterable[Movement]) -> int:
        movements = list(movements)
        with connect(self.db_path) as c:
            for m in movements:
                insert_movement(c, m)
        return len(movements)


# -------------------------
# Snapshot
# -------------------------

def load_snapshot(db_path: str) -> Snapshot:
    """Lê catálogo e histórico numa única conexão (leitura consistente)."""
    with connect(db_path, begin="DEFERRED") as c:
        cats = [category_from_row(r) for r in c.execute("SELECT id, nome, cor FROM categoria ORDER BY rowid")]
        prods = [product_from_row(r) for r in c.execute(_PRODUCT_SELECT + " ORDER BY rowid")]
        movs = [
            movement_from_row(r)
            for r in c.execute(_MOVEMENT_SELECT + " ORDER BY criado_em DESC, rowid DESC")
        ]
    return Snapshot(categories=tuple(cats), products=tuple(prods), movements=tuple(movs))
