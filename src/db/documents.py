# schemaless document collections on top of the sqlite connection
from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import aiosqlite

from db.database import connect


class StoreError(Exception):
    """Raised when the document store cannot complete a read or write."""


class DocumentNotFoundError(StoreError):
    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"No document {collection}/{doc_id}")
        self.collection = collection
        self.doc_id = doc_id


def server_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex


def _to_doc(doc_id: str, raw: str) -> Dict[str, Any]:
    data = json.loads(raw)
    data["id"] = doc_id
    return data


def _dump(data: Dict[str, Any]) -> str:
    payload = {k: v for k, v in data.items() if k != "id"}
    return json.dumps(payload, ensure_ascii=False)


async def add_document(collection: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """Insert a document under a fresh id, stamping createdAt. Returns the stored document."""
    doc_id = _new_id()
    stored = {**data, "createdAt": server_timestamp()}
    try:
        async with connect() as conn:
            await conn.execute(
                "INSERT INTO documents(collection, id, data) VALUES (?, ?, ?);",
                (collection, doc_id, _dump(stored)),
            )
            await conn.commit()
    except aiosqlite.Error as exc:
        raise StoreError(f"add to {collection} failed: {exc}") from exc
    return {**stored, "id": doc_id}


async def set_document(
    collection: str, doc_id: str, data: Dict[str, Any], *, merge: bool = False
) -> None:
    """Create or replace the document with the given id.

    With merge=True only the given fields are overwritten.
    """
    try:
        async with connect() as conn:
            payload = dict(data)
            if merge:
                cur = await conn.execute(
                    "SELECT data FROM documents WHERE collection = ? AND id = ?;",
                    (collection, doc_id),
                )
                row = await cur.fetchone()
                await cur.close()
                if row:
                    payload = {**json.loads(row[0]), **payload}
            await conn.execute(
                """
                INSERT INTO documents(collection, id, data) VALUES (?, ?, ?)
                ON CONFLICT(collection, id) DO UPDATE SET data = excluded.data;
                """,
                (collection, doc_id, _dump(payload)),
            )
            await conn.commit()
    except aiosqlite.Error as exc:
        raise StoreError(f"set {collection}/{doc_id} failed: {exc}") from exc


async def get_document(collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
    try:
        async with connect() as conn:
            cur = await conn.execute(
                "SELECT data FROM documents WHERE collection = ? AND id = ?;",
                (collection, doc_id),
            )
            row = await cur.fetchone()
            await cur.close()
    except aiosqlite.Error as exc:
        raise StoreError(f"get {collection}/{doc_id} failed: {exc}") from exc
    if not row:
        return None
    return _to_doc(doc_id, row[0])


async def update_document(
    collection: str, doc_id: str, fields: Dict[str, Any]
) -> None:
    """Overwrite the given top-level fields of an existing document."""
    try:
        async with connect() as conn:
            cur = await conn.execute(
                "SELECT data FROM documents WHERE collection = ? AND id = ?;",
                (collection, doc_id),
            )
            row = await cur.fetchone()
            await cur.close()
            if not row:
                raise DocumentNotFoundError(collection, doc_id)
            merged = {**json.loads(row[0]), **fields}
            await conn.execute(
                "UPDATE documents SET data = ? WHERE collection = ? AND id = ?;",
                (_dump(merged), collection, doc_id),
            )
            await conn.commit()
    except aiosqlite.Error as exc:
        raise StoreError(f"update {collection}/{doc_id} failed: {exc}") from exc


async def delete_document(collection: str, doc_id: str) -> None:
    try:
        async with connect() as conn:
            await conn.execute(
                "DELETE FROM documents WHERE collection = ? AND id = ?;",
                (collection, doc_id),
            )
            await conn.commit()
    except aiosqlite.Error as exc:
        raise StoreError(f"delete {collection}/{doc_id} failed: {exc}") from exc


async def query_documents(
    collection: str,
    where: Optional[Dict[str, Any]] = None,
    order_by: Optional[str] = None,
    descending: bool = False,
) -> List[Dict[str, Any]]:
    """
    Return the documents of a collection matching every equality filter in
    `where`, optionally ordered on one top-level field. Ties keep insertion
    order (reversed when descending).
    """
    clauses = ["collection = ?"]
    params: List[Any] = [collection]
    for field_name, value in (where or {}).items():
        clauses.append("json_extract(data, ?) = ?")
        params.extend([f"$.{field_name}", value])

    direction = "DESC" if descending else "ASC"
    order_parts = []
    if order_by:
        order_parts.append(f"json_extract(data, ?) {direction}")
        params.append(f"$.{order_by}")
    order_parts.append(f"rowid {direction}")

    sql = (
        "SELECT id, data FROM documents WHERE "
        + " AND ".join(clauses)
        + " ORDER BY "
        + ", ".join(order_parts)
        + ";"
    )
    try:
        async with connect() as conn:
            cur = await conn.execute(sql, tuple(params))
            rows = await cur.fetchall()
            await cur.close()
    except aiosqlite.Error as exc:
        raise StoreError(f"query {collection} failed: {exc}") from exc
    return [_to_doc(row[0], row[1]) for row in rows]
