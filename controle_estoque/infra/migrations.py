# controle_estoque/infra/migrations.py
"""
Migrações de schema usando PRAGMA user_version.

V1: categoria, produto e movimento
V2: carimbos de criação/atualização no produto
"""

from __future__ import annotations

from typing import List
from .db import connect


SCHEMA_V1: List[str] = [
    # Categorias (dados de referência)
    """
    CREATE TABLE IF NOT EXISTS categoria (
        id TEXT PRIMARY KEY,
        nome TEXT NOT NULL,
        cor TEXT NOT NULL
    );
    """,
    # Cadastro de produtos; quantidade = estoque atual
    """
    CREATE TABLE IF NOT EXISTS produto (
        id TEXT PRIMARY KEY,
        nome TEXT NOT NULL,
        categoria_id TEXT NOT NULL,
        quantidade INTEGER NOT NULL DEFAULT 0 CHECK (quantidade >= 0),
        estoque_minimo INTEGER NOT NULL DEFAULT 0 CHECK (estoque_minimo >= 0),
        preco REAL NOT NULL DEFAULT 0 CHECK (preco >= 0),
        unidade TEXT NOT NULL DEFAULT 'un'
    );
    """,
    # Movimentações (imutáveis). Sem FK para produto: o histórico sobrevive
    # à exclusão do produto e aparece como "produto removido" nas listagens.
    """
    CREATE TABLE IF NOT EXISTS movimento (
        id TEXT PRIMARY KEY,
        produto_id TEXT NOT NULL,
        tipo TEXT NOT NULL CHECK (tipo IN ('entry', 'exit')),
        quantidade INTEGER NOT NULL CHECK (quantidade > 0),
        nota TEXT,
        criado_em TEXT NOT NULL
    );
    """,
    """
    CREATE INDEX IF NOT EXISTS ix_movimento_criado_em ON movimento (criado_em);
    """,
]


def _ensure_column(conn, table: str, column: str, ddl: str) -> None:
    """Adiciona coluna se não existir."""
    cur = conn.execute(f"PRAGMA table_info({table});")
    cols = [r[1] for r in cur.fetchall()]  # r[1] é o nome da coluna
    if column not in cols:
        conn.execute(f"ALTER TABLE {table} ADD COLUMN {ddl};")


def _apply_v1(conn) -> None:
    for sql in SCHEMA_V1:
        conn.executescript(sql)


def _apply_v2(conn) -> None:
    _ensure_column(conn, "produto", "criado_em", "criado_em TEXT")
    _ensure_column(conn, "produto", "atualizado_em", "atualizado_em TEXT")


def apply_migrations(db_path: str) -> None:
    """Aplica migrações incrementais de acordo com PRAGMA user_version."""
    with connect(db_path) as conn:
        ver = conn.execute("PRAGMA user_version;").fetchone()[0] or 0

        if ver < 1:
            _apply_v1(conn)
            conn.execute("PRAGMA user_version = 1;")
            ver = 1

        if ver < 2:
            _apply_v2(conn)
            conn.execute("PRAGMA user_version = 2;")
            ver = 2


def schema_version(db_path: str) -> int:
    with connect(db_path) as conn:
        return conn.execute("PRAGMA user_version;").fetchone()[0] or 0
