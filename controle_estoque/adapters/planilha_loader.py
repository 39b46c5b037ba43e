# controle_estoque/adapters/planilha_loader.py
"""
Loaders para planilhas (XLSX) de PRODUTOS e MOVIMENTAÇÕES.

Essas funções:
- leem planilhas XLSX usando pandas;
- normalizam cabeçalhos (acentos, variações, sinônimos);
- retornam listas de dicionários com as chaves esperadas pelos casos de uso.

Observações:
- Preços e quantidades são convertidos com `adapters.parsers`.
- Datas são interpretadas com `pd.to_datetime` e normalizadas para
  datetime (UTC, sem tzinfo) quando possível.
- O tipo da movimentação aceita "entrada"/"saída" e variações.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, List, Optional

import pandas as pd

from controle_estoque.adapters.parsers import parse_price, parse_quantity


# ---------------------------
# utilitários de normalização
# ---------------------------

def _slug(s: str) -> str:
    """Normaliza cabeçalhos: minúsculas, sem acentos, sem não-alfanumérico."""
    if s is None:
        return ""
    s = str(s).strip().lower()
    acentos = dict(zip("áàâãäéèêëíìîïóòôõöúùûüç", "aaaaaeeeeiiiiooooouuuuc"))
    s = "".join(acentos.get(ch, ch) for ch in s)
    s = re.sub(r"[^a-z0-9]+", " ", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s


def _safe_get(row, key):
    """Lê um valor da linha do pandas tratando NA como None."""
    val = row.get(key)
    if val is None or pd.isna(val):
        return None
    s = str(val).strip()
    return s or None


_ALIASES = {
    "id": "id",
    "codigo": "id",
    "cod": "id",
    "sku": "id",

    "nome": "nome",
    "produto": "nome",
    "nome do produto": "nome",
    "descricao": "nome",

    "categoria": "categoria",
    "grupo": "categoria",

    "quantidade": "quantidade",
    "qtde": "quantidade",
    "qtd": "quantidade",
    "estoque": "quantidade",
    "estoque atual": "quantidade",

    "minimo": "estoque_minimo",
    "estoque minimo": "estoque_minimo",
    "qtd minima": "estoque_minimo",
    "quantidade minima": "estoque_minimo",

    "preco": "preco",
    "preco unitario": "preco",
    "valor": "preco",
    "valor unitario": "preco",

    "unidade": "unidade",
    "un": "unidade",

    "tipo": "tipo",
    "movimento": "tipo",
    "operacao": "tipo",

    "data": "data",
    "data movimento": "data",
    "criado em": "data",

    "nota": "nota",
    "observacao": "nota",
    "obs": "nota",
}

_TIPOS = {
    "entrada": "entry",
    "entry": "entry",
    "e": "entry",
    "in": "entry",
    "saida": "exit",
    "exit": "exit",
    "s": "exit",
    "out": "exit",
}


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Renomeia colunas com base em sinônimos/variações."""
    new_cols = {}
    for col in df.columns:
        key = _slug(col)
        new_cols[col] = _ALIASES.get(key, key.replace(" ", "_"))
    return df.rename(columns=new_cols)


def normaliza_tipo(val: Any) -> Optional[str]:
    """'Entrada'/'Saída'/'entry'/'exit'/... -> 'entry' | 'exit' | None."""
    if val is None:
        return None
    return _TIPOS.get(_slug(val))


_ANO_PRIMEIRO = re.compile(r"^\d{4}[-/.]")


def _to_datetime(val: Any) -> Optional[datetime]:
    """Converte a célula de data em datetime (UTC, sem tzinfo) usando pandas.

    Datas que começam pelo ano ("2025/03/01", "2025-03-01T12:00Z") são lidas
    como ano-mês-dia; as demais com o dia primeiro ("01/03/2025 14:30:15").
    """
    if val is None or pd.isna(val):
        return None
    s = str(val).strip()
    if not s:
        return None
    if _ANO_PRIMEIRO.match(s):
        d = pd.to_datetime(s, yearfirst=True, dayfirst=False, errors="coerce")
    else:
        d = pd.to_datetime(s, dayfirst=True, errors="coerce")
    if pd.isna(d):
        return None
    if d.tzinfo is not None:
        d = d.tz_convert("UTC").tz_localize(None)
    return d.to_pydatetime()


def _read(path: str) -> pd.DataFrame:
    df = pd.read_excel(path, dtype="string")
    return _normalize_columns(df)


# ---------------------------
# loaders públicos (XLSX)
# ---------------------------

def load_produtos_from_xlsx(path: str) -> List[Dict[str, Any]]:
    """Lê XLSX de PRODUTOS.

    Campos de saída (chaves do dict por linha):
      - id: str | None (gerado na importação quando ausente)
      - nome: str | None
      - categoria: str | None (nome da categoria)
      - quantidade, estoque_minimo: int | None
      - preco: float | None
      - unidade: str | None
    """
    df = _read(path)
    out: List[Dict[str, Any]] = []
    for _, row in df.iterrows():
        out.append({
            "id": _safe_get(row, "id"),
            "nome": _safe_get(row, "nome"),
            "categoria": _safe_get(row, "categoria"),
            "quantidade": parse_quantity(_safe_get(row, "quantidade")),
            "estoque_minimo": parse_quantity(_safe_get(row, "estoque_minimo")),
            "preco": parse_price(_safe_get(row, "preco")),
            "unidade": _safe_get(row, "unidade"),
        })
    return out


def load_movimentos_from_xlsx(path: str) -> List[Dict[str, Any]]:
    """Lê XLSX de MOVIMENTAÇÕES.

    Campos de saída:
      - produto: str | None (id do produto ou, na falta dele, o nome)
      - tipo: 'entry' | 'exit' | None
      - quantidade: int | None
      - data: datetime | None
      - nota: str | None
    """
    df = _read(path)
    out: List[Dict[str, Any]] = []
    for _, row in df.iterrows():
        out.append({
            "produto": _safe_get(row, "id") or _safe_get(row, "nome"),
            "tipo": normaliza_tipo(_safe_get(row, "tipo")),
            "quantidade": parse_quantity(_safe_get(row, "quantidade")),
            "data": _to_datetime(_safe_get(row, "data")),
            "nota": _safe_get(row, "nota"),
        })
    return out
