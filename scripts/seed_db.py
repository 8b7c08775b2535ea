"""Prepara o banco: aplica database/schema.sql e garante o usuário admin padrão.

Pode ser executado várias vezes; as tabelas usam CREATE TABLE IF NOT EXISTS e
o admin só é criado quando ainda não existe.
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.ponto_eletronico.ponto_eletronico.database.bootstrap import apply_schema, ensure_default_admin, list_tables


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)
    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    print(f"OK: Estrutura aplicada em {target} ({len(list_tables(db_config))} tabelas)")

    ensure_default_admin(db_config)
    print(f"OK: Admin padrão disponível em {target} (admin/admin, troque a senha no primeiro acesso)")


if __name__ == "__main__":
    main()
