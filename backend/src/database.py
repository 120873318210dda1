from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
import sqlite3
import threading
from typing import Any, Iterator

from .settings import DB_PATH, ensure_runtime_dirs


SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA foreign_keys=ON;

CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS sessions (
    token TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    created_at TEXT NOT NULL,
    FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS profiles (
    id TEXT PRIMARY KEY,
    first_name TEXT,
    last_name TEXT,
    state TEXT,
    avatar_url TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    FOREIGN KEY(id) REFERENCES users(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS beneficiaries (
    id INTEGER NOT NULL,
    hadesweb_id INTEGER NOT NULL,
    ce_licenca INTEGER NOT NULL,
    fis_jur TEXT NOT NULL,
    nome TEXT,
    nome_social TEXT,
    dt_nascimento TEXT,
    dt_falecimento TEXT,
    hr_falecimento TEXT,
    cemiterio_falecimento TEXT,
    jazigo_falecimento TEXT,
    num_gaveta_falecimento INTEGER,
    tipo_obito TEXT,
    dt_exumacao TEXT,
    sexo TEXT,
    estado_civil TEXT,
    naturalidade TEXT,
    natural_uf TEXT,
    nacionalidade TEXT,
    cpf_cnpj TEXT,
    rg TEXT,
    rg_org_emissor TEXT,
    rg_uf TEXT,
    rg_dt_emissao TEXT,
    pai TEXT,
    mae TEXT,
    telefone_res TEXT,
    telefone_com TEXT,
    telefone_cel1 TEXT,
    telefone_cel2 TEXT,
    email1 TEXT,
    email2 TEXT,
    religiao TEXT,
    profissao TEXT,
    observacao TEXT,
    sn_possui_jazigo TEXT,
    uso TEXT,
    cemiterio_jazigo TEXT,
    posicao_spc TEXT,
    sn_consumidor_geral TEXT,
    codigo TEXT,
    modulo TEXT,
    endereco TEXT,
    created_by_user TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    PRIMARY KEY (created_by_user, id),
    FOREIGN KEY(created_by_user) REFERENCES users(id)
);

CREATE INDEX IF NOT EXISTS idx_beneficiaries_owner ON beneficiaries(created_by_user, created_at);
CREATE INDEX IF NOT EXISTS idx_beneficiaries_hadesweb ON beneficiaries(created_by_user, hadesweb_id);
"""


class SQLiteStore:
    def __init__(self, db_path: Path = DB_PATH) -> None:
        self.db_path = Path(db_path)
        ensure_runtime_dirs()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._init_schema()

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self.connect() as conn:
            conn.executescript(SCHEMA_SQL)

    def execute(self, sql: str, params: tuple[Any, ...] = ()) -> int:
        with self._lock:
            with self.connect() as conn:
                return conn.execute(sql, params).rowcount

    def fetchone(self, sql: str, params: tuple[Any, ...] = ()) -> sqlite3.Row | None:
        with self.connect() as conn:
            return conn.execute(sql, params).fetchone()

    def fetchall(self, sql: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        with self.connect() as conn:
            return conn.execute(sql, params).fetchall()


store = SQLiteStore()
