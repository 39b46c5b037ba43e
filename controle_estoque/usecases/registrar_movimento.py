# controle_estoque/usecases/registrar_movimento.py
"""
UC: Registrar movimentação (entrada ou saída) e ajustar o estoque do produto.

Regras:
- quantidade inteira e positiva;
- o produto precisa existir;
- saída não pode exceder o estoque disponível.

A inserção da movimentação e o ajuste de `produto.quantidade` acontecem na
mesma transação SQLite.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from controle_estoque.adapters.parsers import format_timestamp, utc_now
from controle_estoque.config import DB_PATH
from controle_estoque.domain.models import Movement, MovementType
from controle_estoque.infra.db import connect
from controle_estoque.infra.logger import (
    log_database_operation, log_movimento, log_system_event
)
from controle_estoque.infra.repositories import insert_movement, new_id


class MovementError(ValueError):
    """Movimentação recusada pelas regras de estoque."""


def registrar_movimento(
    product_id: str,
    tipo: MovementType | str,
    quantidade: int,
    nota: Optional[str] = None,
    criado_em: Optional[datetime] = None,
    db_path: str = DB_PATH,
) -> Movement:
    """Valida, grava a movimentação e devolve o `Movement` criado."""
    try:
        tipo = MovementType(tipo)
    except ValueError:
        raise MovementError(f"tipo de movimentação inválido: {tipo!r}") from None

    log_system_event("registrar_movimento_start", {
        "product_id": product_id, "tipo": tipo.value, "quantidade": quantidade,
    })

    if isinstance(quantidade, bool) or not isinstance(quantidade, int) or quantidade <= 0:
        log_movimento("rejected", product_id, tipo.value, quantidade, motivo="quantidade")
        raise MovementError("Informe uma quantidade válida (inteiro maior que zero).")

    mov = Movement(
        id=new_id(),
        product_id=product_id,
        type=tipo,
        quantity=quantidade,
        note=(nota or "").strip() or None,
        created_at=criado_em or utc_now(),
    )

    try:
        with connect(db_path, begin="IMMEDIATE") as c:
            row = c.execute(
                "SELECT quantidade, unidade FROM produto WHERE id = ?", (product_id,)
            ).fetchone()
            if row is None:
                raise MovementError(f"Produto não encontrado: {product_id}")

            disponivel = int(row["quantidade"])
            if tipo == MovementType.EXIT and quantidade > disponivel:
                raise MovementError(f"Quantidade disponível: {disponivel} {row['unidade']}")

            delta = quantidade if tipo == MovementType.ENTRY else -quantidade
            insert_movement(c, mov)
            c.execute(
                "UPDATE produto SET quantidade = quantidade + ?, atualizado_em = ? WHERE id = ?",
                (delta, format_timestamp(utc_now()), product_id),
            )

        log_database_operation("movimento", "INSERT", 1, id=mov.id)
        log_database_operation("produto", "UPDATE", 1, id=product_id, delta=delta)
        log_movimento("insert", product_id, tipo.value, quantidade, id=mov.id)
        return mov

    except MovementError as e:
        log_movimento("rejected", product_id, tipo.value, quantidade, motivo=str(e))
        raise
    except Exception as e:
        log_system_event("registrar_movimento_error", {
            "product_id": product_id, "error": str(e),
        }, level="error")
        raise
