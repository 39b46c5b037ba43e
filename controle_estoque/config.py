# controle_estoque/config.py
"""
Configurações globais e valores padrão do controle de estoque.
"""

import os
from dataclasses import dataclass


# Caminho padrão do banco de dados SQLite
DB_PATH = os.environ.get("ESTOQUE_DB") or os.path.join(os.getcwd(), "estoque.db")


@dataclass
class DefaultConfig:
    """Valores padrão para relatórios e projeções."""
    periodo: str = "30d"             # 7d | 30d | 90d | all
    top_n: int = 5                   # tamanho dos rankings exibidos
    dias_critico: int = 7            # days_until_empty <= 7  -> critical
    dias_alerta: int = 30            # days_until_empty <= 30 -> warning
    dias_mes: int = 30               # base da projeção mensal
    movimentos_recentes: int = 5     # itens no painel


# Instância global dos valores padrão
DEFAULTS = DefaultConfig()
