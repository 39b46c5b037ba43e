# controle_estoque/adapters/backup.py
"""
Backup completo em JSON (exportar / importar).

Formato (version 1), com chaves em camelCase:

    {
      "version": 1,
      "exportedAt": "2025-03-01T12:00:00Z",
      "categories": [{"id", "name", "color"}],
      "products":   [{"id", "name", "categoryId", "quantity", "minStock",
                      "price", "unit", "createdAt", "updatedAt"}],
      "movements":  [{"id", "productId", "type", "quantity", "note", "createdAt"}]
    }

A importação preserva os ids, ignora registros cujo id já existe e grava
tudo numa única transação.
Movimentações importadas NÃO ajustam o estoque: a quantidade do produto
no backup já reflete o histórico.
"""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Dict

from controle_estoque.adapters.parsers import (
    format_timestamp, parse_price, parse_quantity, parse_timestamp, utc_now
)
from controle_estoque.config import DB_PATH
from controle_estoque.domain.models import Category, Movement, MovementType, Product, Snapshot
from controle_estoque.infra.db import connect
from controle_estoque.infra.logger import (
    log_database_operation, log_file_operation, log_system_event
)
from controle_estoque.infra.migrations import apply_migrations
from controle_estoque.infra.repositories import (
    insert_category, insert_movement, insert_product, load_snapshot
)

BACKUP_VERSION = 1


class BackupError(ValueError):
    """Arquivo de backup inválido ou de versão não suportada."""


def _ts(dt) -> Any:
    return format_timestamp(dt) + "Z" if dt is not None else None


def snapshot_to_dict(snap: Snapshot) -> Dict[str, Any]:
    return {
        "version": BACKUP_VERSION,
        "exportedAt": _ts(utc_now()),
        "categories": [{"id": c.id, "name": c.name, "color": c.color} for c in snap.categories],
        "products": [
            {
                "id": p.id,
                "name": p.name,
                "categoryId": p.category_id,
                "quantity": p.quantity,
                "minStock": p.min_stock,
                "price": p.price,
                "unit": p.unit,
                "createdAt": _ts(p.created_at),
                "updatedAt": _ts(p.updated_at),
            }
            for p in snap.products
        ],
        "movements": [
            {
                "id": m.id,
                "productId": m.product_id,
                "type": m.type.value,
                "quantity": m.quantity,
                "note": m.note,
                "createdAt": _ts(m.created_at),
            }
            for m in snap.movements
        ],
    }


def _product_from_dict(p: Dict[str, Any]) -> Product:
    quantity = parse_quantity(p.get("quantity")) or 0
    min_stock = parse_quantity(p.get("minStock")) or 0
    price = parse_price(p.get("price")) or 0.0
    if quantity < 0 or min_stock < 0 or price < 0:
        raise BackupError(f"produto inválido no backup: {p.get('id')!r} (valores negativos)")
    return Product(
        id=str(p["id"]),
        name=p["name"],
        category_id=str(p["categoryId"]),
        quantity=quantity,
        min_stock=min_stock,
        price=price,
        unit=p.get("unit") or "un",
        created_at=parse_timestamp(p.get("createdAt")),
        updated_at=parse_timestamp(p.get("updatedAt")),
    )


def snapshot_from_dict(data: Dict[str, Any]) -> Snapshot:
    """Valida e converte o conteúdo de um backup em `Snapshot`."""
    if not isinstance(data, dict):
        raise BackupError("backup deve ser um objeto JSON")
    if data.get("version") != BACKUP_VERSION:
        raise BackupError(f"versão de backup não suportada: {data.get('version')!r}")

    try:
        cats = tuple(
            Category(id=str(c["id"]), name=c["name"], color=c.get("color") or Category.color)
            for c in data.get("categories") or []
        )
        prods = tuple(_product_from_dict(p) for p in data.get("products") or [])
        movs = []
        for m in data.get("movements") or []:
            qty = parse_quantity(m.get("quantity"))
            created = parse_timestamp(m.get("createdAt"))
            if qty is None or qty <= 0 or created is None:
                raise BackupError(f"movimentação inválida no backup: {m.get('id')!r}")
            movs.append(
                Movement(
                    id=str(m["id"]),
                    product_id=str(m["productId"]),
                    type=MovementType(m["type"]),
                    quantity=qty,
                    note=m.get("note"),
                    created_at=created,
                )
            )
    except BackupError:
        raise
    except (KeyError, ValueError) as e:
        raise BackupError(f"backup malformado: {e}") from e

    return Snapshot(categories=cats, products=prods, movements=tuple(movs))


def exportar_backup(path: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    snap = load_snapshot(db_path)
    data = snapshot_to_dict(snap)
    Path(path).write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    info = {
        "arquivo": path,
        "categorias": len(snap.categories),
        "produtos": len(snap.products),
        "movimentos": len(snap.movements),
    }
    log_file_operation("export", path, rows_processed=sum(v for k, v in info.items() if k != "arquivo"))
    return info


def importar_backup(path: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    """
    Importa um backup JSON; registros com id já existente são ignorados.

    Tudo é gravado numa única transação: se qualquer registro for recusado
    pelo banco, nada do arquivo fica gravado.
    """
    log_system_event("importar_backup_start", {"file_path": path})
    try:
        apply_migrations(db_path)
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise BackupError(f"arquivo não é JSON válido: {e}") from e
        snap = snapshot_from_dict(data)

        try:
            with connect(db_path, begin="IMMEDIATE") as c:
                cat_ids = {r[0] for r in c.execute("SELECT id FROM categoria")}
                prod_ids = {r[0] for r in c.execute("SELECT id FROM produto")}
                mov_ids = {r[0] for r in c.execute("SELECT id FROM movimento")}

                novas_cats = [x for x in snap.categories if x.id not in cat_ids]
                novos_prods = [x for x in snap.products if x.id not in prod_ids]
                novos_movs = [x for x in snap.movements if x.id not in mov_ids]

                for cat in novas_cats:
                    insert_category(c, cat)
                for p in novos_prods:
                    insert_product(c, p)
                for m in novos_movs:
                    insert_movement(c, m)
        except sqlite3.IntegrityError as e:
            raise BackupError(f"backup recusado pelo banco: {e}") from e

        result = {
            "arquivo": path,
            "categorias": len(novas_cats),
            "produtos": len(novos_prods),
            "movimentos": len(novos_movs),
            "ignorados": (len(snap.categories) - len(novas_cats))
            + (len(snap.products) - len(novos_prods))
            + (len(snap.movements) - len(novos_movs)),
        }
        log_database_operation("backup", "INSERT", len(novas_cats) + len(novos_prods) + len(novos_movs))
        log_file_operation("import", path, rows_processed=len(novas_cats) + len(novos_prods) + len(novos_movs))
        log_system_event("importar_backup_success", result)
        return result
    except Exception as e:
        log_system_event("importar_backup_error", {"file_path": path, "error": str(e)}, level="error")
        raise
