import sqlite3
from threading import Lock
from typing import Optional, List, Dict, Any


class PartyRecord:
    """
    队伍详单：每支进入副本的队伍记录一行，保存在 SQLite 中。
    默认使用内存数据库，只在本次运行内有效。多个副本线程共享同一个连接，由锁串行化。
    """

    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        self._lock = Lock()
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._init_db()

    def _init_db(self) -> None:
        with self._lock:
            cur = self._conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS party_records (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    instance_id INTEGER NOT NULL,
                    clear_time INTEGER NOT NULL,
                    start_time TEXT NOT NULL,
                    end_time TEXT
                )
                """
            )
            self._conn.commit()

    def create_record(self, instance_id: int, clear_time: int, start_time: str) -> int:
        """
        队伍进入副本时创建记录，返回记录 ID。
        """
        with self._lock:
            cur = self._conn.cursor()
            cur.execute(
                """
                INSERT INTO party_records (instance_id, clear_time, start_time)
                VALUES (?, ?, ?)
                """,
                (instance_id, clear_time, start_time),
            )
            self._conn.commit()
            return cur.lastrowid

    def complete_record(self, record_id: int, end_time: str) -> None:
        with self._lock:
            cur = self._conn.cursor()
            cur.execute(
                "UPDATE party_records SET end_time = ? WHERE id = ?",
                (end_time, record_id),
            )
            self._conn.commit()

    def get_record(self, record_id: int) -> Optional[Dict[str, Any]]:
        with self._lock:
            cur = self._conn.cursor()
            cur.execute(
                """
                SELECT id, instance_id, clear_time, start_time, end_time
                FROM party_records
                WHERE id = ?
                """,
                (record_id,),
            )
            row = cur.fetchone()
        if row:
            return {
                "id": row[0],
                "instance_id": row[1],
                "clear_time": row[2],
                "start_time": row[3],
                "end_time": row[4],
            }
        return None

    def get_instance_details(self, instance_id: int) -> List[Dict[str, Any]]:
        with self._lock:
            cur = self._conn.cursor()
            cur.execute(
                """
                SELECT id, clear_time, start_time, end_time
                FROM party_records
                WHERE instance_id = ?
                ORDER BY id ASC
                """,
                (instance_id,),
            )
            rows = cur.fetchall()
        result: List[Dict[str, Any]] = []
        for r in rows:
            result.append(
                {
                    "id": r[0],
                    "clear_time": r[1],
                    "start_time": r[2],
                    "end_time": r[3],
                }
            )
        return result

    def get_summary(self) -> Dict[str, int]:
        """
        汇总：记录总数、已完成的队伍数、已完成队伍的通关时间之和。
        """
        with self._lock:
            cur = self._conn.cursor()
            cur.execute(
                """
                SELECT COUNT(*),
                       COUNT(end_time),
                       SUM(CASE WHEN end_time IS NOT NULL THEN clear_time ELSE 0 END)
                FROM party_records
                """
            )
            row = cur.fetchone()
        return {
            "total_parties": row[0] or 0,
            "completed_parties": row[1] or 0,
            "total_clear_time": row[2] or 0,
        }

    def clear_all_records(self) -> None:
        with self._lock:
            cur = self._conn.cursor()
            cur.execute("DELETE FROM party_records")
            self._conn.commit()

    def close(self) -> None:
        with self._lock:
            self._conn.close()
