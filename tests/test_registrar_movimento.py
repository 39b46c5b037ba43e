import pytest

from controle_estoque.domain.models import MovementType
from controle_estoque.infra.migrations import apply_migrations
from controle_estoque.infra.repositories import CategoryRepo, MovementRepo, ProductRepo
from controle_estoque.usecases.registrar_movimento import MovementError, registrar_movimento


@pytest.fixture
def produto(tmp_path):
    db = str(tmp_path / "estoque.db")
    apply_migrations(db)
    cat = CategoryRepo(db).insert({"name": "Limpeza"})
    p = ProductRepo(db).insert({"name": "Sabão", "category_id": cat.id, "quantity": 10, "unit": "un"})
    return db, p.id


def test_entrada_soma_ao_estoque(produto):
    db, pid = produto
    mov = registrar_movimento(pid, "entry", 5, nota="  compra  ", db_path=db)

    assert mov.type == MovementType.ENTRY
    assert mov.note == "compra"
    assert ProductRepo(db).get(pid).quantity == 15
    assert MovementRepo(db).get(mov.id) is not None


def test_saida_subtrai_do_estoque(produto):
    db, pid = produto
    registrar_movimento(pid, MovementType.EXIT, 10, db_path=db)
    assert ProductRepo(db).get(pid).quantity == 0


def test_saida_acima_do_disponivel_e_recusada(produto):
    db, pid = produto
    with pytest.raises(MovementError, match="Quantidade disponível: 10 un"):
        registrar_movimento(pid, "exit", 11, db_path=db)

    assert ProductRepo(db).get(pid).quantity == 10
    assert MovementRepo(db).get_all() == []


@pytest.mark.parametrize("qtd", [0, -3, 2.5, True, "5"])
def test_quantidade_invalida(produto, qtd):
    db, pid = produto
    with pytest.raises(MovementError):
        registrar_movimento(pid, "entry", qtd, db_path=db)


def test_tipo_invalido(produto):
    db, pid = produto
    with pytest.raises(MovementError):
        registrar_movimento(pid, "transfer", 1, db_path=db)


def test_produto_inexistente(produto):
    db, _ = produto
    with pytest.raises(MovementError, match="Produto não encontrado"):
        registrar_movimento("nao-existe", "entry", 1, db_path=db)
    assert MovementRepo(db).get_all() == []
