# controle_estoque/usecases/importar_planilha.py
"""
UC: Importar PRODUTOS e MOVIMENTAÇÕES de planilhas XLSX.

- Produtos: categorias são resolvidas pelo nome (criadas se não existirem);
  produtos com id já cadastrado são ignorados.
- Movimentações: cada linha passa por `registrar_movimento`, portanto ajusta
  o estoque e respeita as mesmas regras (saída <= disponível). Linhas
  recusadas são reportadas em `erros` sem interromper as demais.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from controle_estoque.adapters.planilha_loader import (
    load_movimentos_from_xlsx, load_produtos_from_xlsx
)
from controle_estoque.config import DB_PATH
from controle_estoque.infra.logger import log_file_operation, log_system_event
from controle_estoque.infra.migrations import apply_migrations
from controle_estoque.infra.repositories import CategoryRepo, ProductRepo
from controle_estoque.usecases.registrar_movimento import MovementError, registrar_movimento

CATEGORIA_PADRAO = "Geral"


def run_importar_produtos(path: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Lê um XLSX de PRODUTOS e cadastra os que ainda não existem."""
    log_system_event("importar_produtos_start", {"file_path": path})
    apply_migrations(db_path)
    rows = load_produtos_from_xlsx(path)
    log_file_operation("import", path, rows_processed=len(rows))

    cat_repo = CategoryRepo(db_path)
    prod_repo = ProductRepo(db_path)
    cats = {c.name.strip().lower(): c for c in cat_repo.get_all()}
    existentes = {p.id for p in prod_repo.get_all()}

    inseridos = 0
    erros: List[Dict[str, Any]] = []
    for i, r in enumerate(rows, start=2):  # linha 1 = cabeçalho
        if not r.get("nome"):
            erros.append({"linha": i, "mensagem": "produto sem nome"})
            continue
        if r.get("id") and r["id"] in existentes:
            continue
        nome_cat = r.get("categoria") or CATEGORIA_PADRAO
        cat = cats.get(nome_cat.strip().lower())
        if cat is None:
            cat = cat_repo.insert({"name": nome_cat})
            cats[nome_cat.strip().lower()] = cat
        p = prod_repo.insert({
            "id": r.get("id"),
            "name": r["nome"],
            "category_id": cat.id,
            "quantity": r.get("quantidade") or 0,
            "min_stock": r.get("estoque_minimo") or 0,
            "price": r.get("preco") or 0.0,
            "unit": r.get("unidade") or "un",
        })
        existentes.add(p.id)
        inseridos += 1

    result = {"tipo": "Produtos", "total": len(rows), "sucessos": inseridos, "erros": erros}
    log_system_event("importar_produtos_success", {"file_path": path, "inseridos": inseridos})
    return result


def run_importar_movimentos(path: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Lê um XLSX de MOVIMENTAÇÕES e registra cada linha, na ordem cronológica."""
    log_system_event("importar_movimentos_start", {"file_path": path})
    apply_migrations(db_path)
    rows = load_movimentos_from_xlsx(path)
    log_file_operation("import", path, rows_processed=len(rows))

    prods = ProductRepo(db_path).get_all()
    por_id = {p.id: p.id for p in prods}
    por_nome = {p.name.strip().lower(): p.id for p in prods}

    numeradas = list(enumerate(rows, start=2))
    # sem data vai para o fim; a ordem da planilha desempata
    numeradas.sort(key=lambda t: (t[1]["data"] is None, t[1]["data"] or datetime.min))

    sucessos = 0
    erros: List[Dict[str, Any]] = []
    for linha, r in numeradas:
        ref = r.get("produto")
        pid = por_id.get(ref) or por_nome.get((ref or "").strip().lower())
        if pid is None:
            erros.append({"linha": linha, "mensagem": f"produto não encontrado: {ref}"})
            continue
        if r.get("tipo") is None:
            erros.append({"linha": linha, "mensagem": "tipo deve ser entrada ou saída"})
            continue
        try:
            registrar_movimento(
                pid, r["tipo"], r.get("quantidade"),
                nota=r.get("nota"), criado_em=r.get("data"), db_path=db_path,
            )
            sucessos += 1
        except MovementError as e:
            erros.append({"linha": linha, "mensagem": str(e)})

    result = {"tipo": "Movimentações", "total": len(rows), "sucessos": sucessos, "erros": erros}
    log_system_event("importar_movimentos_success", {
        "file_path": path, "sucessos": sucessos, "erros": len(erros),
    })
    return result
