import asyncio
import json
import os
import sqlite3
import threading

from shared.clients.store.StoreClientInterface import StoreClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class StoreClientSqlite(StoreClientInterface):
    """SQLite-backed store shared by every worker process on one host.

    The database runs in WAL mode and every statement commits immediately, so a
    read after a finished write sees it from any process. Blocking calls run in a
    worker thread; one connection is shared behind a lock.
    """

    _SCHEMA = (
        "CREATE TABLE IF NOT EXISTS kv ("
        " namespace TEXT NOT NULL,"
        " key TEXT NOT NULL,"
        " value TEXT NOT NULL,"
        " PRIMARY KEY (namespace, key))"
    )

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        default_path = os.path.join(helper_config.get_root_dir(), "data", "sessions.db")
        self.path = self.get_config_val("PATH", default=default_path, val_type="string")
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def _get_engine_name(self) -> str:
        return "Sqlite"

    def _get_required_config(self) -> list[EnvConfig]:
        return [EnvConfig(env_key="PATH", val_type="string", default="sessions.db")]

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    def _open(self) -> sqlite3.Connection:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        conn = sqlite3.connect(self.path, check_same_thread=False, isolation_level=None, timeout=5.0)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        conn.execute(self._SCHEMA)
        return conn

    async def boot(self) -> None:
        if self._conn is None:
            self._conn = await asyncio.to_thread(self._open)
            self.logging.info("SQLite session store opened at %s", self.path)

    async def close(self) -> None:
        if self._conn is not None:
            conn, self._conn = self._conn, None
            await asyncio.to_thread(conn.close)

    def _query(self, sql: str, params: tuple = ()) -> list[tuple]:
        with self._lock:
            return self._connection().execute(sql, params).fetchall()

    def _write(self, sql: str, params: tuple = ()) -> int:
        with self._lock:
            return self._connection().execute(sql, params).rowcount

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("SQLite store not booted. Call boot() before use.")
        return self._conn

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_get(self, namespace: str, key: str) -> dict | None:
        rows = await asyncio.to_thread(
            self._query, "SELECT value FROM kv WHERE namespace = ? AND key = ?", (namespace, key)
        )
        return json.loads(rows[0][0]) if rows else None

    async def do_put(self, namespace: str, key: str, value: dict) -> None:
        await asyncio.to_thread(
            self._write,
            "INSERT INTO kv (namespace, key, value) VALUES (?, ?, ?) "
            "ON CONFLICT(namespace, key) DO UPDATE SET value = excluded.value",
            (namespace, key, json.dumps(value)),
        )

    async def do_delete(self, namespace: str, key: str) -> bool:
        deleted = await asyncio.to_thread(
            self._write, "DELETE FROM kv WHERE namespace = ? AND key = ?", (namespace, key)
        )
        return deleted > 0

    async def do_list(self, namespace: str) -> list[str]:
        rows = await asyncio.to_thread(
            self._query, "SELECT key FROM kv WHERE namespace = ? ORDER BY rowid", (namespace,)
        )
        return [row[0] for row in rows]
