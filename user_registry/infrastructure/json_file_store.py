"""JSON File User Store — the backing JSON array on disk, with serialized appends.

Invariants:
    - Missing file is an empty store, never an error
    - Every read parses the file fresh; no in-memory cache
    - Content that is not an array of well-formed records raises CorruptStoreError
      and is never overwritten (append validates before it writes)
    - append holds the store's write lock across the whole read-modify-write,
      so concurrent appends get distinct ids and none is lost
    - A cancelled append still finishes its write before the lock is released
    - Writes go to a temp file in the same directory, fsync, then os.replace:
      readers see either the old array or the new one, never a truncated file

Design Decisions:
    - asyncio.Lock per store instance over a module-level lock: the store is
      injected, two stores on two paths do not contend
    - Blocking disk IO via asyncio.to_thread: keeps the event loop serving
      other requests while a write is in flight
    - Raw dicts are what get rewritten: unknown keys on existing records survive
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path

import pydantic
from pydantic import TypeAdapter

from user_registry.core.domain_types import UserId
from user_registry.core.errors import CorruptStoreError, StoreIOError
from user_registry.core.user_sequence import next_user_id
from user_registry.schemas.user import UserCreate, UserRecord

logger = logging.getLogger(__name__)

_RECORDS = TypeAdapter(list[UserRecord])


class JsonFileUserStore:
    """File-backed UserRepository. One instance per backing file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._write_lock = asyncio.Lock()

    async def load_all(self) -> list[UserRecord]:
        raw = await asyncio.to_thread(self._read_raw)
        return self._validate(raw)

    async def append(self, fields: UserCreate) -> UserId:
        """Assign the next id, persist the record, return the id."""
        # the worker thread cannot be cancelled, so the caller must not be
        # able to drop the lock while a write is still in flight
        return await asyncio.shield(self._append_locked(fields))

    async def _append_locked(self, fields: UserCreate) -> UserId:
        async with self._write_lock:
            raw = await asyncio.to_thread(self._read_raw)
            records = self._validate(raw)
            user_id = next_user_id(records)
            record = UserRecord(id=user_id, **fields.model_dump())
            raw.append(record.model_dump())
            await asyncio.to_thread(self._write_raw, raw)
        logger.info(
            f"User {user_id} appended",
            extra={"user_id": user_id, "store_path": str(self.path)},
        )
        return user_id

    async def find_by_id(self, user_id: int) -> UserRecord | None:
        for record in await self.load_all():
            if record.id == user_id:
                return record
        return None

    # ─── Disk IO (runs in worker threads) ───────────────────────

    def _read_raw(self) -> list:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except UnicodeDecodeError as e:
            raise CorruptStoreError(f"not valid UTF-8 ({e.reason})", str(self.path))
        except OSError as e:
            raise StoreIOError(str(e), "read")
        if not text.strip():
            return []
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CorruptStoreError(f"invalid JSON ({e.msg})", str(self.path))
        except RecursionError:
            raise CorruptStoreError("JSON nested too deeply", str(self.path))
        if not isinstance(data, list):
            raise CorruptStoreError(
                f"expected a JSON array, got {type(data).__name__}", str(self.path),
            )
        return data

    def _write_raw(self, raw: list) -> None:
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(raw, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None:
                _discard(tmp_name)
            raise StoreIOError(str(e), "write")

    def _validate(self, raw: list) -> list[UserRecord]:
        try:
            records = _RECORDS.validate_python(raw)
        except pydantic.ValidationError as e:
            first = e.errors()[0]
            where = ".".join(str(loc) for loc in first["loc"])
            raise CorruptStoreError(
                f"malformed record at {where}: {first['msg']}", str(self.path),
            )
        seen: set[int] = set()
        for record in records:
            if record.id in seen:
                raise CorruptStoreError(f"duplicate id {record.id}", str(self.path))
            seen.add(record.id)
        return records


def _discard(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
