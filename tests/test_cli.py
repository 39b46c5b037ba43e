import json
from pathlib import Path

from typer.testing import CliRunner

from controle_estoque.adapters.cli import app
from controle_estoque.infra.repositories import ProductRepo

runner = CliRunner()


def _setup(tmp_path: Path):
    db_path = str(tmp_path / "estoque_test.sqlite")
    result = runner.invoke(app, ["migrate", "--db", db_path])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["categoria", "add", "Limpeza", "--db", db_path])
    assert result.exit_code == 0, result.output
    cat_id = result.stdout.strip()

    result = runner.invoke(
        app,
        [
            "produto", "add", "Sabão",
            "--categoria", cat_id,
            "--quantidade", "10",
            "--minimo", "3",
            "--preco", "2,00",
            "--db", db_path,
        ],
    )
    assert result.exit_code == 0, result.output
    return db_path, cat_id, result.stdout.strip()


def test_cli_cadastro_e_movimentacao(tmp_path: Path):
    db_path, _, pid = _setup(tmp_path)

    result = runner.invoke(
        app, ["movimento", "registrar", pid, "--tipo", "saida", "--quantidade", "4", "--db", db_path]
    )
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["produto", "list", "--db", db_path])
    assert result.exit_code == 0, result.output
    assert ProductRepo(db_path).get(pid).quantity == 6

    result = runner.invoke(app, ["movimento", "list", "--db", db_path])
    assert result.exit_code == 0, result.output


def test_cli_saida_acima_do_estoque(tmp_path: Path):
    db_path, _, pid = _setup(tmp_path)
    result = runner.invoke(
        app, ["movimento", "registrar", pid, "--tipo", "saida", "--quantidade", "11", "--db", db_path]
    )
    assert result.exit_code == 1
    assert "Quantidade disponível" in result.stdout


def test_cli_rel_consumo_json(tmp_path: Path):
    db_path, _, pid = _setup(tmp_path)
    for qtd in ("3", "3"):
        result = runner.invoke(
            app, ["movimento", "registrar", pid, "--tipo", "saida", "--quantidade", qtd, "--db", db_path]
        )
        assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["rel", "consumo", "--periodo", "30d", "--json", "--db", db_path])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)

    assert data["kind"] == "consumption"
    assert data["period"] == "30d"
    [linha] = data["consumption"]
    assert linha["totalConsumed"] == 6
    assert linha["currentQuantity"] == 4
    assert linha["dailyAverage"] == 0.2
    assert linha["daysUntilEmpty"] == 20
    assert linha["urgency"] == "warning"
    assert data["urgencyCounts"] == {"critical": 0, "warning": 1, "ok": 0}
    assert data["totals"]["totalExitQty"] == 6


def test_cli_rel_geral_com_filtro(tmp_path: Path):
    db_path, cat_id, pid = _setup(tmp_path)
    runner.invoke(app, ["movimento", "registrar", pid, "--tipo", "entrada", "--quantidade", "5", "--db", db_path])

    result = runner.invoke(app, ["rel", "geral", "-p", "7d", "--produto", "outro", "--json", "--db", db_path])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["productFilter"] == ["outro"]
    assert data["totals"]["movementCount"] == 0
    assert data["stock"]["totalValue"] == 30.0
    assert data["categoryBreakdown"][0]["categoryId"] == cat_id

    # saída em tabelas também funciona
    result = runner.invoke(app, ["rel", "entradas", "--periodo", "all", "--db", db_path])
    assert result.exit_code == 0, result.output
    assert "Relatório de Entradas" in result.stdout


def test_cli_rel_periodo_invalido(tmp_path: Path):
    db_path = str(tmp_path / "e.sqlite")
    result = runner.invoke(app, ["rel", "saidas", "--periodo", "15d", "--db", db_path])
    assert result.exit_code == 1
    assert "período inválido" in result.stdout


def test_cli_rel_vazio(tmp_path: Path):
    db_path = str(tmp_path / "e.sqlite")
    result = runner.invoke(app, ["rel", "consumo", "--db", db_path])
    assert result.exit_code == 0, result.output
    assert "Sem dados no período" in result.stdout


def test_cli_alertas_painel_backup(tmp_path: Path):
    db_path, cat_id, pid = _setup(tmp_path)
    runner.invoke(app, ["movimento", "registrar", pid, "--tipo", "saida", "--quantidade", "8", "--db", db_path])

    result = runner.invoke(app, ["alertas", "--db", db_path])
    assert result.exit_code == 0, result.output
    assert "Estoque Crítico" in result.stdout

    result = runner.invoke(app, ["painel", "--db", db_path])
    assert result.exit_code == 0, result.output

    arquivo = str(tmp_path / "backup.json")
    result = runner.invoke(app, ["backup", "exportar", arquivo, "--db", db_path])
    assert result.exit_code == 0, result.output

    outro_db = str(tmp_path / "copia.sqlite")
    result = runner.invoke(app, ["backup", "importar", arquivo, "--db", outro_db])
    assert result.exit_code == 0, result.output
    assert "1 produtos" in result.stdout

    result = runner.invoke(app, ["categoria", "rm", cat_id, "--db", db_path])
    assert result.exit_code == 1


def test_cli_produto_edit_e_rm(tmp_path: Path):
    db_path, _, pid = _setup(tmp_path)
    result = runner.invoke(app, ["produto", "edit", pid, "--preco", "R$ 3,50", "--db", db_path])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["produto", "edit", pid, "--db", db_path])
    assert result.exit_code == 1

    result = runner.invoke(app, ["produto", "rm", pid, "--db", db_path])
    assert result.exit_code == 0, result.output
    result = runner.invoke(app, ["produto", "rm", pid, "--db", db_path])
    assert result.exit_code == 1


def test_cli_comandos_sem_migrate(tmp_path: Path):
    db_path = str(tmp_path / "novo.sqlite")
    for args in (["categoria", "list"], ["produto", "list"], ["movimento", "list"], ["alertas"], ["painel"]):
        result = runner.invoke(app, args + ["--db", db_path])
        assert result.exit_code == 0, (args, result.output)

    result = runner.invoke(app, ["categoria", "add", "Limpeza", "--db", str(tmp_path / "outro.sqlite")])
    assert result.exit_code == 0, result.output
    assert result.stdout.strip()


def test_cli_produto_edit_categoria_inexistente(tmp_path: Path):
    db_path, cat_id, pid = _setup(tmp_path)
    result = runner.invoke(app, ["produto", "edit", pid, "--categoria", "nao-existe", "--db", db_path])
    assert result.exit_code == 1
    assert "categoria não encontrada" in result.stdout

    assert ProductRepo(db_path).get(pid).category_id == cat_id


def test_cli_backup_invalido(tmp_path: Path):
    db_path, _, _ = _setup(tmp_path)
    arquivo = tmp_path / "ruim.json"
    arquivo.write_text(json.dumps({
        "version": 1,
        "products": [{"id": "x", "name": "X", "categoryId": "c", "quantity": -1}],
    }), encoding="utf-8")
    result = runner.invoke(app, ["backup", "importar", str(arquivo), "--db", db_path])
    assert result.exit_code == 1
    assert "Erro" in result.stdout
