# app.py
"""
Entrypoint da aplicação.

Uso:
  python app.py migrate --db estoque.db
  python app.py categoria add Limpeza
  python app.py produto add "Detergente" --categoria <id> --preco 2,50 --minimo 10
  python app.py movimento registrar <produto> --tipo saida --quantidade 3
  python app.py rel consumo --periodo 30d
  python app.py alertas
"""

from controle_estoque.adapters.cli import main

if __name__ == "__main__":
    main()
