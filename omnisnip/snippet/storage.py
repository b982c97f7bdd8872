"""JSON-file persistence for the snippet collection."""

from __future__ import annotations

import asyncio
import json
import logging
import shutil
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, List, Mapping, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import StorageDirectoryError, StorageReadError, StorageWriteError
from .model import CreateSnippetInput, Snippet, SnippetFilter, UpdateSnippetInput
from .query import apply_filter

logger = logging.getLogger("omnisnip")

DEFAULT_DIRNAME = ".omnisnip"
DATA_FILENAME = "snippets.json"

_T = TypeVar("_T")
_M = TypeVar("_M", bound=BaseModel)


def default_storage_dir() -> Path:
    return Path.home() / DEFAULT_DIRNAME


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _coerce(model: type[_M], value: _M | Mapping[str, Any] | None) -> _M:
    if isinstance(value, model):
        return value
    return model.model_validate(dict(value or {}))


class StorageService:
    """CRUD and query operations over a single JSON file of snippets.

    Every operation reads the whole collection, works on it in memory and,
    when it mutates, writes the whole collection back. A missing file is an
    empty collection; the directory is only created on first write.

    Operations on one instance are serialised by an ``asyncio.Lock``. Several
    instances or processes pointed at the same directory are not coordinated
    and the last write wins.
    """

    def __init__(self, storage_dir: Path | str | None = None) -> None:
        self.storage_path = Path(storage_dir) if storage_dir is not None else default_storage_dir()
        self.data_file = self.storage_path / DATA_FILENAME
        self._lock = asyncio.Lock()

    async def add(self, payload: CreateSnippetInput | Mapping[str, Any]) -> Snippet:
        """Create a snippet, append it to the collection and persist it."""
        data = _coerce(CreateSnippetInput, payload)
        async with self._lock:
            snippets = await self._run(self._read_sync)
            now = _utcnow()
            snippet = Snippet(
                id=str(uuid.uuid4()),
                title=data.title,
                description=data.description,
                code=data.code,
                language=data.language,
                category=data.category,
                tags=list(data.tags) if data.tags is not None else [],
                favorite=data.favorite if data.favorite is not None else False,
                created_at=now,
                updated_at=now,
            )
            snippets.append(snippet)
            await self._run(self._write_sync, snippets)
        logger.info("Added snippet %s (%s)", snippet.id, snippet.title)
        return snippet

    async def get_all(self) -> List[Snippet]:
        async with self._lock:
            return await self._run(self._read_sync)

    async def get_by_id(self, snippet_id: str) -> Snippet | None:
        snippets = await self.get_all()
        return next((snippet for snippet in snippets if snippet.id == snippet_id), None)

    async def update(
        self,
        snippet_id: str,
        payload: UpdateSnippetInput | Mapping[str, Any],
    ) -> Snippet | None:
        """Overwrite the supplied fields of one snippet.

        Returns the updated snippet, or ``None`` when no snippet has the id.
        The record keeps its position, id and creation time.
        """
        changes = _coerce(UpdateSnippetInput, payload).changes()
        async with self._lock:
            snippets = await self._run(self._read_sync)
            index = next(
                (position for position, snippet in enumerate(snippets) if snippet.id == snippet_id),
                None,
            )
            if index is None:
                return None

            original = snippets[index]
            changes["updated_at"] = max(_utcnow(), original.updated_at)
            updated = original.model_copy(update=changes)
            snippets[index] = updated
            await self._run(self._write_sync, snippets)
        logger.info("Updated snippet %s", snippet_id)
        return updated

    async def delete(self, snippet_id: str) -> bool:
        async with self._lock:
            snippets = await self._run(self._read_sync)
            remaining = [snippet for snippet in snippets if snippet.id != snippet_id]
            if len(remaining) == len(snippets):
                return False
            await self._run(self._write_sync, remaining)
        logger.info("Deleted snippet %s", snippet_id)
        return True

    async def delete_all(self) -> None:
        async with self._lock:
            await self._run(self._write_sync, [])
        logger.info("Deleted all snippets in %s", self.data_file)

    async def filter(
        self,
        criteria: SnippetFilter | Mapping[str, Any] | None = None,
    ) -> List[Snippet]:
        """Return the snippets matching every supplied criterion, optionally sorted."""
        selected = _coerce(SnippetFilter, criteria)
        snippets = await self.get_all()
        return apply_filter(snippets, selected)

    async def search(self, text: str) -> List[Snippet]:
        return await self.filter(SnippetFilter(query=text))

    async def cleanup(self) -> None:
        """Remove the storage directory and everything in it."""
        async with self._lock:
            await self._run(self._remove_sync)

    async def _run(self, func: Callable[..., _T], *args: Any) -> _T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    def _read_sync(self) -> List[Snippet]:
        try:
            raw = self.data_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No storage file at %s yet", self.data_file)
            return []
        except OSError as exc:
            raise StorageReadError(self.data_file, str(exc)) from exc
        except UnicodeDecodeError as exc:
            raise StorageReadError(self.data_file, f"invalid UTF-8 ({exc})") from exc

        try:
            documents = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageReadError(self.data_file, f"invalid JSON ({exc})") from exc
        if not isinstance(documents, list):
            raise StorageReadError(self.data_file, "expected a JSON array of snippets")

        try:
            snippets = [Snippet.model_validate(document) for document in documents]
        except ValidationError as exc:
            raise StorageReadError(self.data_file, f"malformed snippet record ({exc})") from exc
        logger.debug("Read %d snippets from %s", len(snippets), self.data_file)
        return snippets

    def _write_sync(self, snippets: List[Snippet]) -> None:
        self._ensure_storage_path()
        payload = json.dumps([snippet.to_document() for snippet in snippets], indent=2)
        try:
            self.data_file.write_text(payload, encoding="utf-8")
        except OSError as exc:
            raise StorageWriteError(self.data_file, str(exc)) from exc
        logger.debug("Wrote %d snippets to %s", len(snippets), self.data_file)

    def _ensure_storage_path(self) -> None:
        try:
            self.storage_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageDirectoryError(self.storage_path, str(exc)) from exc

    def _remove_sync(self) -> None:
        try:
            shutil.rmtree(self.storage_path)
        except FileNotFoundError:
            return
        except OSError as exc:
            raise StorageDirectoryError(self.storage_path, str(exc)) from exc
        logger.info("Removed storage directory %s", self.storage_path)


__all__ = ["DATA_FILENAME", "StorageService", "default_storage_dir"]
