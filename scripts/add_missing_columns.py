"""One-off script to bring an existing database up to the current models.

Older databases predate the `epingle` flag on `commande_db`, the `role`
column on `client_db` and the timezone of `notification_preferences`.
`create_db()` only creates missing tables, so those columns are added here.

Usage (from the project root):
    python scripts/add_missing_columns.py

Each column is checked with the SQLAlchemy inspector first and ALTER TABLE
runs only when it is missing. It prints the actions taken.
"""
import os
import sys
from sqlalchemy import inspect, text

# Ensure the project root is on sys.path so `import app` works when running
# this script directly.
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.db.session import engine, DATABASE_URL

# table -> [(column, MySQL definition, SQLite definition)]
MISSING_COLUMNS = {
    "commande_db": [
        ("epingle", "TINYINT(1) NOT NULL DEFAULT 0", "BOOLEAN NOT NULL DEFAULT 0"),
    ],
    "client_db": [
        ("role", "VARCHAR(20) NOT NULL DEFAULT 'client'", "VARCHAR(20) NOT NULL DEFAULT 'client'"),
    ],
    "notification_preferences": [
        ("timezone", "VARCHAR(64) NULL DEFAULT 'Europe/Paris'", "VARCHAR(64) DEFAULT 'Europe/Paris'"),
    ],
}


def main():
    sqlite = DATABASE_URL.startswith("sqlite")
    inspector = inspect(engine)
    tables = set(inspector.get_table_names())
    with engine.begin() as conn:
        for table, columns in MISSING_COLUMNS.items():
            if table not in tables:
                print(f"Table '{table}' absente, elle sera créée au démarrage de l'API.")
                continue
            existing = {c["name"] for c in inspector.get_columns(table)}
            for name, mysql_def, sqlite_def in columns:
                if name in existing:
                    print(f"Colonne '{table}.{name}' déjà présente.")
                    continue
                ddl = sqlite_def if sqlite else mysql_def
                conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {name} {ddl}"))
                print(f"Colonne '{table}.{name}' ajoutée.")


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        print("Erreur lors de l'exécution du script:", str(e))
        raise
