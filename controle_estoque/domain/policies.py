"""
Políticas de classificação do estoque.

Este módulo contém as regras de negócio de classificação de urgência
de consumo e de situação do estoque frente ao mínimo cadastrado. As
funções aqui expostas são utilizadas pela camada de aplicação ao montar
relatórios, alertas e o painel.
"""

from __future__ import annotations

from typing import Optional

from controle_estoque.config import DEFAULTS
from controle_estoque.domain.models import Product, Urgency


def classifica_urgencia(
    days_until_empty: Optional[int],
    dias_critico: int = DEFAULTS.dias_critico,
    dias_alerta: int = DEFAULTS.dias_alerta,
) -> Urgency:
    """Classifica a urgência de reposição de um produto.

    Regras:
        - ``days_until_empty`` é ``None`` (sem consumo recente) → ``OK``
        - ``days_until_empty <= dias_critico`` → ``CRITICAL``
        - ``days_until_empty <= dias_alerta`` → ``WARNING``
        - caso contrário → ``OK``

    Args:
        days_until_empty: Dias projetados até o estoque zerar.
        dias_critico: Limite (inclusive) para urgência crítica.
        dias_alerta: Limite (inclusive) para alerta.

    Returns:
        Um membro de :class:`Urgency`.
    """
    if days_until_empty is None:
        return Urgency.OK
    if days_until_empty <= dias_critico:
        return Urgency.CRITICAL
    if days_until_empty <= dias_alerta:
        return Urgency.WARNING
    return Urgency.OK


def estoque_baixo(p: Product) -> bool:
    """Estoque no mínimo cadastrado ou abaixo dele."""
    return p.quantity <= p.min_stock


def sem_estoque(p: Product) -> bool:
    return p.quantity == 0


def percentual_do_minimo(p: Product) -> float:
    """Percentual do estoque atual em relação ao mínimo, limitado a 100.

    Produtos sem mínimo cadastrado retornam 0.
    """
    if p.min_stock <= 0:
        return 0.0
    return min(p.quantity / p.min_stock * 100.0, 100.0)
