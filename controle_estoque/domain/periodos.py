# controle_estoque/domain/periodos.py
"""
Filtro de período: restringe movimentações a uma janela retroativa.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List

from controle_estoque.domain.models import Movement, Period


def cutoff_for(period: Period, now: datetime):
    """Início (inclusive) da janela, ou None para `all`."""
    period = Period.parse(period)
    if period.days is None:
        return None
    return now - timedelta(days=period.days)


def filter_by_period(movements: Iterable[Movement], period: Period, now: datetime) -> List[Movement]:
    """
    Mantém as movimentações com `created_at >= now - N dias` (subtração de
    calendário). `Period.ALL` devolve todas, na mesma ordem.
    """
    cutoff = cutoff_for(period, now)
    if cutoff is None:
        return list(movements)
    return [m for m in movements if m.created_at >= cutoff]
