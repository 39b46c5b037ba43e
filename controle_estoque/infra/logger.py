# controle_estoque/infra/logger.py
"""
Sistema de logging do controle de estoque.

Este módulo configura e fornece loggers para registrar as operações
relevantes do sistema: movimentações, operações no banco de dados,
montagem de relatórios e eventos gerais.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional


# Flag global para habilitar/desabilitar logging (ESTOQUE_LOG=1 habilita)
ENABLE_LOGGING = os.environ.get("ESTOQUE_LOG", "0").strip().lower() in {"1", "true", "sim", "yes"}

# Configuração base dos loggers
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

def setup_logger(name: str, log_file: str, level: int = logging.INFO) -> logging.Logger:
    """
    Configura um logger específico com arquivo de saída.

    Args:
        name: Nome do logger
        log_file: Caminho do arquivo de log
        level: Nível de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Logger configurado
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    while logger.handlers:
        logger.removeHandler(logger.handlers[0])

    # delay=True: o arquivo só é aberto na primeira gravação
    file_handler = logging.FileHandler(log_file, encoding='utf-8', delay=True)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(file_handler)

    return logger

# Diretório base para logs (na pasta do pacote, ou ESTOQUE_LOG_DIR)
BASE_DIR = Path(__file__).parent.parent
LOGS_DIR = Path(os.environ.get("ESTOQUE_LOG_DIR") or (BASE_DIR / "logs"))

LOG_FILES = {
    "system": LOGS_DIR / "system.log",
    "movimentos": LOGS_DIR / "movimentos.log",
    "database": LOGS_DIR / "database.log",
    "relatorios": LOGS_DIR / "relatorios.log",
}

system_logger = setup_logger('estoque.system', str(LOG_FILES["system"]))
movimento_logger = setup_logger('estoque.movimentos', str(LOG_FILES["movimentos"]))
database_logger = setup_logger('estoque.database', str(LOG_FILES["database"]))
report_logger = setup_logger('estoque.relatorios', str(LOG_FILES["relatorios"]))


def log_movimento(action: str, product_id: str, tipo: str, quantidade: int, **kwargs) -> None:
    """
    Log específico para movimentações de estoque.

    Args:
        action: Ação realizada (insert, rejected, import)
        product_id: Identificador do produto
        tipo: entry | exit
        quantidade: Quantidade movimentada
        **kwargs: Dados adicionais
    """
    if not ENABLE_LOGGING:
        return
    log_data = {
        "action": action,
        "product_id": product_id,
        "tipo": tipo,
        "quantidade": quantidade,
        **kwargs
    }
    movimento_logger.info(f"MOVIMENTO_{action.upper()}: {log_data}")

def log_database_operation(table: str, operation: str, affected_rows: int = 0, **kwargs) -> None:
    """
    Log específico para operações no banco de dados.

    Args:
        table: Nome da tabela
        operation: Operação SQL (INSERT, UPDATE, DELETE, SELECT)
        affected_rows: Número de linhas afetadas
        **kwargs: Dados adicionais
    """
    if not ENABLE_LOGGING:
        return
    log_data = {
        "table": table,
        "operation": operation,
        "affected_rows": affected_rows,
        **kwargs
    }
    database_logger.info(f"DB_{operation}: {log_data}")

def log_report(kind: str, period: str, **kwargs) -> None:
    """Log de montagem de relatório (tipo, período e contagens)."""
    if not ENABLE_LOGGING:
        return
    log_data = {"kind": kind, "period": period, **kwargs}
    report_logger.info(f"REPORT_{kind.upper()}: {log_data}")

def log_system_event(event: str, details: Optional[Dict[str, Any]] = None, level: str = "info") -> None:
    """
    Log para eventos do sistema.

    Args:
        event: Descrição do evento
        details: Detalhes adicionais (opcional)
        level: Nível do log (info, warning, error)
    """
    if not ENABLE_LOGGING:
        return
    log_data = {
        "event": event,
        "details": details or {}
    }
    log_method = getattr(system_logger, level.lower(), system_logger.info)
    log_method(f"SYSTEM_EVENT: {event} - {log_data}")

def log_file_operation(operation: str, file_path: str, rows_processed: int = 0, **kwargs) -> None:
    """Log para operações de arquivo (importação/exportação)."""
    if not ENABLE_LOGGING:
        return
    log_data = {
        "operation": operation,
        "file_path": file_path,
        "rows_processed": rows_processed,
        **kwargs
    }
    system_logger.info(f"FILE_{operation.upper()}: {log_data}")

def get_log_summary(log_type: str = "system", lines: int = 100) -> str:
    """
    Obtém as linhas mais recentes de um log.

    Args:
        log_type: Tipo de log (system, movimentos, database, relatorios)
        lines: Número de linhas a retornar

    Returns:
        Conteúdo do log como string
    """
    log_file = LOG_FILES.get(log_type)
    if not log_file or not log_file.exists():
        return f"Log {log_type} não encontrado."

    with open(log_file, 'r', encoding='utf-8') as f:
        all_lines = f.readlines()
    return ''.join(all_lines[-lines:])
