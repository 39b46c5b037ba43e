"""
Utilidades de parsing para valores vindos de fora do sistema.

Este módulo interpreta os formatos encontrados em backups JSON,
planilhas e argumentos de linha de comando: preços escritos com vírgula
ou prefixo de moeda ("R$ 12,50"), quantidades inteiras e carimbos de
data/hora ISO-8601 (com ou sem fuso, inclusive o sufixo "Z").

Convenção de horário: todos os instantes são normalizados para UTC
*sem* tzinfo (naive), de modo que possam ser comparados entre si e com
o `now` passado ao motor de relatórios.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Any, Optional

_NUM_RE = re.compile(r"[-+]?\d+(?:[.,]\d+)*")


def utc_now() -> datetime:
    """Instante atual em UTC, sem tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_timestamp(val: Any) -> Optional[datetime]:
    """Interpreta um carimbo de data/hora.

    Exemplos:
        "2025-03-01T12:00:00.000Z"  → datetime(2025, 3, 1, 12, 0)
        "2025-03-01 09:00:00-03:00" → datetime(2025, 3, 1, 12, 0)
        "01/03/2025"                → datetime(2025, 3, 1, 0, 0)

    Returns:
        datetime naive em UTC, ou None quando vazio/ininteligível.
    """
    if val is None:
        return None
    if isinstance(val, datetime):
        dt = val
    elif isinstance(val, date):
        dt = datetime(val.year, val.month, val.day)
    else:
        s = str(val).strip()
        if not s:
            return None
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            dt = None
            for fmt in ("%d/%m/%Y %H:%M", "%d/%m/%Y", "%d-%m-%Y", "%d/%m/%y"):
                try:
                    dt = datetime.strptime(s, fmt)
                    break
                except ValueError:
                    continue
            if dt is None:
                return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def format_timestamp(dt: datetime) -> str:
    return dt.isoformat(timespec="seconds")


def parse_price(val: Any) -> Optional[float]:
    """Interpreta um preço.

    Aceita números, "12.5", "12,50", "R$ 1.234,56" e "1,234.56".

    Returns:
        O valor como float, ou None se nenhum número for encontrado.
    """
    if val is None:
        return None
    if isinstance(val, bool):
        return None
    if isinstance(val, (int, float)):
        return float(val)
    s = str(val).strip()
    m = _NUM_RE.search(s)
    if not m:
        return None
    num = m.group(0)
    # O último separador presente é o decimal; os demais são de milhar
    last_sep = max(num.rfind(","), num.rfind("."))
    if last_sep == -1:
        return float(num)
    inteiro = re.sub(r"[.,]", "", num[:last_sep])
    decimal = num[last_sep + 1:]
    if len(decimal) == 3 and num.count(num[last_sep]) > 1:
        # "1.234.567": só separadores de milhar
        return float(re.sub(r"[.,]", "", num))
    return float(f"{inteiro}.{decimal}")


def parse_quantity(val: Any) -> Optional[int]:
    """Interpreta uma quantidade inteira ("10", "10.0", "10 un")."""
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, int):
        return val
    if isinstance(val, float):
        return int(val) if val.is_integer() else None
    m = _NUM_RE.search(str(val))
    if not m:
        return None
    try:
        f = float(m.group(0).replace(",", "."))
    except ValueError:
        return None
    return int(f) if f.is_integer() else None
