"""SQLite persistence for items and tags.

The store is an explicit object handed to the application; nothing here is a
process-wide connection. Item listings load tag names in the same pass so the
result can be turned into a search snapshot without further queries.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .errors import StoreError

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS items (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        description TEXT,
        path TEXT NOT NULL,
        created_at DATE NOT NULL,
        updated_at DATETIME NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS tags (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE COLLATE NOCASE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS taggings (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        tag_id INTEGER NOT NULL,
        item_id INTEGER NOT NULL,
        FOREIGN KEY (tag_id) REFERENCES tags(id) ON DELETE CASCADE,
        FOREIGN KEY (item_id) REFERENCES items(id) ON DELETE CASCADE,
        UNIQUE(tag_id, item_id)
    );
    """,
)

# Tag names are joined with a separator that cannot appear in typed input.
_TAG_SEP = "\x1f"

_ITEMS_WITH_TAGS = f"""
    SELECT i.*, GROUP_CONCAT(t.name, '{_TAG_SEP}') AS tag_names
    FROM items i
    LEFT JOIN taggings tg ON i.id = tg.item_id
    LEFT JOIN tags t ON tg.tag_id = t.id
"""


@dataclass
class Tag:
    id: Optional[int]
    name: str


@dataclass
class Item:
    """An archived entry and its folder.

    Attributes:
        id: Row id (None until saved)
        name: Display name
        created_at: Item date as YYYY-MM-DD
        path: Folder holding the item's files
        description: Optional free text, may span several lines
        updated_at: Last save time (set by the store)
        tags: Tag names, sorted by name
    """

    id: Optional[int]
    name: str
    created_at: str
    path: str = ""
    description: Optional[str] = None
    updated_at: Optional[str] = None
    tags: List[str] = field(default_factory=list)


def _now() -> str:
    return datetime.now().strftime(TIMESTAMP_FORMAT)


def _split_tags(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return sorted(raw.split(_TAG_SEP), key=str.lower)


def _item_from_row(row: sqlite3.Row) -> Item:
    keys = row.keys()
    return Item(
        id=row["id"],
        name=row["name"],
        created_at=row["created_at"],
        path=row["path"],
        description=row["description"],
        updated_at=row["updated_at"],
        tags=_split_tags(row["tag_names"]) if "tag_names" in keys else [],
    )


class Store:
    """Items, tags and taggings in one SQLite database."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    @classmethod
    def open(cls, db_path: Path) -> "Store":
        """Open (and create if needed) the database at ``db_path``.

        Raises:
            StoreError: If the database cannot be opened or initialized
        """
        conn: Optional[sqlite3.Connection] = None
        try:
            if str(db_path) != ":memory:":
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(db_path))
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys=ON;")
            for statement in _SCHEMA:
                conn.execute(statement)
            conn.commit()
        except (OSError, sqlite3.Error) as e:
            if conn is not None:
                conn.close()
            raise StoreError(f"Cannot open database {db_path}: {e}") from e
        logger.debug("Opened database %s", db_path)
        return cls(conn)

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # -------------------------
    # Low-level helpers
    # -------------------------

    def _query(self, sql: str, params: Iterable[Any] = ()) -> List[sqlite3.Row]:
        try:
            return self.conn.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Query failed: {e}") from e

    def _write(self, statements: Iterable[tuple]) -> Optional[int]:
        """Run (sql, params) pairs in one transaction; return the last rowid."""
        last: Optional[int] = None
        try:
            with self.conn:
                for sql, params in statements:
                    last = self.conn.execute(sql, params).lastrowid
        except sqlite3.Error as e:
            raise StoreError(f"Write failed: {e}") from e
        return last

    # -------------------------
    # Items
    # -------------------------

    def list_items(self) -> List[Item]:
        """All items with their tags, newest first."""
        rows = self._query(
            _ITEMS_WITH_TAGS + " GROUP BY i.id ORDER BY i.created_at DESC, i.id DESC"
        )
        return [_item_from_row(r) for r in rows]

    def get_item(self, item_id: int) -> Optional[Item]:
        rows = self._query(_ITEMS_WITH_TAGS + " WHERE i.id = ? GROUP BY i.id", [item_id])
        return _item_from_row(rows[0]) if rows else None

    def items_for_tag(self, tag_id: int) -> List[Item]:
        """Items carrying ``tag_id`` (with all their tags), newest first."""
        rows = self._query(
            _ITEMS_WITH_TAGS
            + """
            WHERE i.id IN (SELECT item_id FROM taggings WHERE tag_id = ?)
            GROUP BY i.id
            ORDER BY i.created_at DESC, i.id DESC
            """,
            [tag_id],
        )
        return [_item_from_row(r) for r in rows]

    def save_item(self, item: Item) -> Item:
        """Insert or update ``item``; sets ``id`` and ``updated_at``."""
        item.updated_at = _now()
        if item.id is not None:
            self._write(
                [
                    (
                        "UPDATE items SET name = ?, description = ?, path = ?, "
                        "created_at = ?, updated_at = ? WHERE id = ?",
                        (
                            item.name,
                            item.description,
                            item.path,
                            item.created_at,
                            item.updated_at,
                            item.id,
                        ),
                    )
                ]
            )
            logger.debug("Updated item %s", item.id)
        else:
            item.id = self._write(
                [
                    (
                        "INSERT INTO items (name, description, path, created_at, updated_at) "
                        "VALUES (?, ?, ?, ?, ?)",
                        (
                            item.name,
                            item.description,
                            item.path,
                            item.created_at,
                            item.updated_at,
                        ),
                    )
                ]
            )
            logger.info("Created item %s (%s)", item.id, item.name)
        return item

    def delete_item(self, item: Item) -> None:
        if item.id is None:
            return
        self._write(
            [
                ("DELETE FROM taggings WHERE item_id = ?", (item.id,)),
                ("DELETE FROM items WHERE id = ?", (item.id,)),
            ]
        )
        logger.info("Deleted item %s (%s)", item.id, item.name)

    def set_item_tags(self, item_id: int, tag_ids: Iterable[int]) -> None:
        """Replace the tags of ``item_id`` with ``tag_ids``."""
        statements: List[tuple] = [("DELETE FROM taggings WHERE item_id = ?", (item_id,))]
        seen: Dict[int, None] = {}
        for tag_id in tag_ids:
            if tag_id in seen:
                continue
            seen[tag_id] = None
            statements.append(
                ("INSERT INTO taggings (tag_id, item_id) VALUES (?, ?)", (tag_id, item_id))
            )
        self._write(statements)

    # -------------------------
    # Tags
    # -------------------------

    def list_tags(self) -> List[Tag]:
        rows = self._query("SELECT * FROM tags ORDER BY name COLLATE NOCASE")
        return [Tag(id=r["id"], name=r["name"]) for r in rows]

    def find_or_create_tag(self, name: str) -> Tag:
        """Return the tag named ``name`` (case-insensitive), creating it uppercased."""
        normalized = name.strip().upper()
        if not normalized:
            raise ValueError("Tag name cannot be empty.")
        rows = self._query(
            "SELECT * FROM tags WHERE name = ? COLLATE NOCASE", [normalized]
        )
        if rows:
            return Tag(id=rows[0]["id"], name=rows[0]["name"])
        tag_id = self._write([("INSERT INTO tags (name) VALUES (?)", (normalized,))])
        logger.debug("Created tag %s (%s)", tag_id, normalized)
        return Tag(id=tag_id, name=normalized)
