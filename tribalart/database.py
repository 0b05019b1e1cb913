# tribalart/database.py
"""
File-backed stand-in for the hosted relational store, using CSV (preferred) or
Excel (xlsx) files as tables. Provides the query surface the storefront
consumes: column filters, ordering, denormalized joins, uniqueness
constraints and a per-table change feed. Uses file locking to avoid
simultaneous writes corrupting files.

Usage:
    from tribalart.database import db
    db.select("products", {"status": "active"}, order_by="created_at", descending=True)
    db.create_record("wishlist", {"user_id": uid, "product_id": pid})
    db.changes.subscribe("products", on_change)
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
from datetime import datetime, timezone
import json
import uuid
import pandas as pd
from filelock import FileLock
from tribalart.config import settings
from tribalart.realtime import ChangeFeed, ChangeEvent, INSERT, UPDATE, DELETE

DATA_DIR = Path(settings.DATA_DIR)
if not DATA_DIR.exists():
    DATA_DIR.mkdir(parents=True, exist_ok=True)


class DatabaseError(Exception):
    """Remote-store failure. `code` mirrors the service's error codes."""
    code = "XX000"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class UniqueViolation(DatabaseError):
    code = "23505"


class ForeignKeyViolation(DatabaseError):
    code = "23503"


class RecordNotFound(DatabaseError):
    code = "PGRST116"


# remote uniqueness constraints, per table
UNIQUE_CONSTRAINTS: Dict[str, List[Tuple[str, ...]]] = {
    "users": [("email",)],
    "profiles": [("id",)],
    "sellers": [("user_id",)],
    "cart_items": [("user_id", "product_id")],
    "wishlist": [("user_id", "product_id")],
}

# column -> (referenced table, referenced column), checked on insert
FOREIGN_KEYS: Dict[str, Dict[str, Tuple[str, str]]] = {
    "sellers": {"user_id": ("users", "id")},
    "products": {"seller_id": ("sellers", "id")},
    "cart_items": {"product_id": ("products", "id")},
    "wishlist": {"product_id": ("products", "id")},
}


def _encode_value(v: Any) -> str:
    # tables are string-oriented; lists/dicts are stored as JSON
    if v is None:
        return ""
    if isinstance(v, (list, dict)):
        return json.dumps(v, ensure_ascii=False)
    if isinstance(v, datetime):
        return v.isoformat(sep=" ")
    return str(v)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(sep=" ")


class FileBackedDB:
    """
    Manages CSV / Excel files inside DATA_DIR.
    Table name corresponds to a file name in settings (or you may pass full filename).
    """

    def __init__(self, data_dir: Path = DATA_DIR, unique_constraints=None, foreign_keys=None):
        self.data_dir = Path(data_dir)
        self.unique_constraints = UNIQUE_CONSTRAINTS if unique_constraints is None else unique_constraints
        self.foreign_keys = FOREIGN_KEYS if foreign_keys is None else foreign_keys
        self.changes = ChangeFeed()

    def _file_path(self, table: str) -> Path:
        """
        Resolve table -> file path. If table looks like a filename (has .csv/.xlsx),
        use it directly (relative to data_dir). Otherwise try config mapping,
        else fallback to table + .csv
        """
        if table.endswith(".csv") or table.endswith(".xlsx"):
            return self.data_dir / Path(table)

        mapping = {
            "users": settings.USERS_FILE,
            "profiles": settings.PROFILES_FILE,
            "sellers": settings.SELLERS_FILE,
            "products": settings.PRODUCTS_FILE,
            "cart_items": settings.CART_ITEMS_FILE,
            "wishlist": settings.WISHLIST_FILE,
            "password_resets": settings.PASSWORD_RESETS_FILE,
        }
        filename = mapping.get(table, f"{table}.csv")
        return Path(self.data_dir) / Path(filename)

    def _lock_for(self, path: Path) -> FileLock:
        return FileLock(str(path) + ".lock")

    def _read_df(self, table: str) -> pd.DataFrame:
        path = self._file_path(table)
        if not path.exists():
            return pd.DataFrame()
        if path.suffix.lower() in (".xls", ".xlsx"):
            return pd.read_excel(path, dtype=str).fillna("")
        try:
            return pd.read_csv(path, dtype=str).fillna("")
        except pd.errors.EmptyDataError:
            return pd.DataFrame()

    def _write_df_nolock(self, path: Path, df: pd.DataFrame) -> None:
        """
        Write DataFrame to `path` WITHOUT acquiring file lock.
        Use this only when the caller already holds the lock.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix.lower() in (".xls", ".xlsx"):
            df.to_excel(path, index=False)
        else:
            df.to_csv(path, index=False)

    @staticmethod
    def _row(df: pd.DataFrame, idx) -> Dict[str, Any]:
        row = df.loc[idx].to_dict()
        return {k: ("" if pd.isna(v) else v) for k, v in row.items()}

    @staticmethod
    def _mask(df: pd.DataFrame, filters: Optional[Dict[str, Any]]) -> pd.Series:
        mask = pd.Series(True, index=df.index)
        for col, value in (filters or {}).items():
            if col not in df.columns:
                return pd.Series(False, index=df.index)
            mask &= df[col].astype(str) == str(value)
        return mask

    def _check_unique(self, table: str, df: pd.DataFrame, row: Dict[str, str], ignore_index=None) -> None:
        if df.empty:
            return
        for cols in self.unique_constraints.get(table, []):
            if any(c not in df.columns or not row.get(c) for c in cols):
                continue
            mask = self._mask(df, {c: row[c] for c in cols})
            if ignore_index is not None:
                mask &= ~df.index.isin(ignore_index)
            if mask.any():
                raise UniqueViolation(
                    f'duplicate key value violates unique constraint "{table}_{"_".join(cols)}_key"'
                )

    def _check_foreign_keys(self, table: str, row: Dict[str, str]) -> None:
        for col, (ref_table, ref_col) in self.foreign_keys.get(table, {}).items():
            value = row.get(col)
            if not value:
                continue
            if self.get_record(ref_table, ref_col, value) is None:
                raise ForeignKeyViolation(
                    f'insert or update on table "{table}" violates foreign key constraint "{table}_{col}_fkey"'
                )

    # --- high-level CRUD primitives ---

    def list_records(self, table: str) -> List[Dict[str, Any]]:
        df = self._read_df(table)
        if df.empty:
            return []
        return df.where(pd.notnull(df), None).to_dict(orient="records")

    def select(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        """
        Rows where every column in `filters` equals the given value (string compare),
        optionally ordered by one column.
        """
        df = self._read_df(table)
        if df.empty:
            return []
        df = df[self._mask(df, filters)]
        if order_by and order_by in df.columns:
            df = df.sort_values(order_by, ascending=not descending, kind="mergesort")
        return df.to_dict(orient="records")

    def get_record(self, table: str, key: str, value: Any) -> Optional[Dict[str, Any]]:
        rows = self.select(table, {key: value})
        return rows[0] if rows else None

    def single(self, table: str, filters: Dict[str, Any]) -> Dict[str, Any]:
        """Exactly one row or RecordNotFound."""
        rows = self.select(table, filters)
        if not rows:
            raise RecordNotFound("JSON object requested, multiple (or no) rows returned")
        return rows[0]

    def create_record(self, table: str, data: Dict[str, Any], id_field: str = "id") -> Dict[str, Any]:
        """
        Create a new record. If id_field not present in `data`, one will be generated (uuid4 hex).
        `created_at` defaults to now. Raises UniqueViolation on a constraint clash.
        Returns the saved record (with id).
        """
        data = dict(data)
        if id_field not in data or not data.get(id_field):
            data[id_field] = uuid.uuid4().hex
        if not data.get("created_at"):
            data["created_at"] = _now()
        new_row = {k: _encode_value(v) for k, v in data.items()}
        self._check_foreign_keys(table, new_row)

        path = self._file_path(table)
        with self._lock_for(path):
            df = self._read_df(table)
            self._check_unique(table, df, new_row)
            df = pd.concat([df, pd.DataFrame([new_row])], ignore_index=True, sort=False).fillna("")
            self._write_df_nolock(path, df)

        self.changes.publish(ChangeEvent(table=table, event_type=INSERT, new=dict(new_row)))
        return data

    def update_where(self, table: str, filters: Dict[str, Any], updates: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        Update every row matching `filters`. Returns the updated rows (empty list if none matched).
        """
        encoded = {k: _encode_value(v) for k, v in updates.items()}
        path = self._file_path(table)
        with self._lock_for(path):
            df = self._read_df(table)
            if df.empty:
                return []
            mask = self._mask(df, filters)
            if not mask.any():
                return []
            olds = [self._row(df, i) for i in df[mask].index]
            for k in encoded:
                if k not in df.columns:
                    df[k] = ""
            for idx in df[mask].index:
                candidate = {**self._row(df, idx), **encoded}
                self._check_unique(table, df, candidate, ignore_index=[idx])
            for k, v in encoded.items():
                df.loc[mask, k] = v
            self._write_df_nolock(path, df)
            news = [self._row(df, i) for i in df[mask].index]

        for old, new in zip(olds, news):
            self.changes.publish(ChangeEvent(table=table, event_type=UPDATE, old=old, new=new))
        return news

    def update_record(self, table: str, key: str, value: Any, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Update rows where df[key] == value with fields in updates. Returns the updated first row dict or None.
        """
        rows = self.update_where(table, {key: value}, updates)
        return rows[0] if rows else None

    def delete_where(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        Delete all rows matching `filters`. Returns the deleted rows.
        """
        path = self._file_path(table)
        with self._lock_for(path):
            df = self._read_df(table)
            if df.empty:
                return []
            mask = self._mask(df, filters)
            if not mask.any():
                return []
            deleted = [self._row(df, i) for i in df[mask].index]
            self._write_df_nolock(path, df[~mask])

        for old in deleted:
            self.changes.publish(ChangeEvent(table=table, event_type=DELETE, old=old))
        return deleted

    def delete_record(self, table: str, key: str, value: Any) -> bool:
        """
        Delete all records where df[key] == value. Returns True if any rows were removed.
        """
        return bool(self.delete_where(table, {key: value}))

    # --- denormalized joins ---

    def embed(
        self,
        rows: Iterable[Dict[str, Any]],
        table: str,
        local_key: str,
        alias: str,
        columns: Optional[Sequence[str]] = None,
        remote_key: str = "id",
    ) -> List[Dict[str, Any]]:
        """
        Embed the related `table` row (restricted to `columns`) into each of `rows` under `alias`,
        matching rows[local_key] == related[remote_key]. Missing relations embed None.
        """
        rows = list(rows)
        related = {}
        for r in self.list_records(table):
            related.setdefault(str(r.get(remote_key)), r)
        out = []
        for row in rows:
            match = related.get(str(row.get(local_key)))
            if match is not None and columns:
                match = {c: match.get(c, "") for c in columns}
            out.append({**row, alias: dict(match) if match is not None else None})
        return out


# module-level singleton for convenience
db = FileBackedDB()
