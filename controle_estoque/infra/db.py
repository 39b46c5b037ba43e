# controle_estoque/infra/db.py
"""
Utilidades de conexão SQLite.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

# segundos aguardando outro processo liberar o banco
BUSY_TIMEOUT_S = 10.0


@contextmanager
def connect(db_path: str, begin: Optional[str] = None) -> Iterator[sqlite3.Connection]:
    """
    Context manager para abrir conexão SQLite com:
    - foreign_keys ON
    - row_factory = sqlite3.Row
    - commit ao sair (rollback em caso de exceção)

    `begin` abre a transação logo na entrada:
    - "DEFERRED": leituras de várias tabelas enxergam o mesmo estado
      (usado pelo snapshot dos relatórios);
    - "IMMEDIATE": reserva a escrita antes da primeira leitura, de modo
      que conferir o estoque e gravar a movimentação não intercalem com
      outro processo.
    """
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, timeout=BUSY_TIMEOUT_S)
    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        if begin:
            conn.execute(f"BEGIN {begin};")
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
