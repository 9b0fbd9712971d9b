"""Debounced schema directory watcher with asyncio queue bridge."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
import threading
from typing import Awaitable, Callable

from watchdog.events import PatternMatchingEventHandler
from watchdog.observers import Observer


LOGGER = logging.getLogger(__name__)

_CHANGE_EVENTS = frozenset({"created", "modified", "deleted", "moved"})


class DebouncedSchemaHandler(PatternMatchingEventHandler):
    """Collapse a burst of schema file changes into one queued notification.

    Any change invalidates the whole schema set, so there is a single timer
    for the directory rather than one per file.
    """

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        queue: asyncio.Queue[Path],
        debounce_seconds: float = 0.5,
    ) -> None:
        super().__init__(
            patterns=["*.json"],
            ignore_patterns=["*.tmp", "*.part", ".*", "*~"],
            ignore_directories=True,
            case_sensitive=False,
        )
        self._loop = loop
        self._queue = queue
        self._debounce_seconds = debounce_seconds
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    def _emit_path(self, raw_path: str) -> None:
        with self._lock:
            self._timer = None
        self._loop.call_soon_threadsafe(self._queue.put_nowait, Path(raw_path))

    def on_any_event(self, event) -> None:  # type: ignore[override]
        if event.event_type not in _CHANGE_EVENTS:
            return
        path = getattr(event, "dest_path", "") or event.src_path
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            timer = threading.Timer(self._debounce_seconds, self._emit_path, args=(path,))
            timer.daemon = True
            self._timer = timer
            timer.start()

    def close(self) -> None:
        with self._lock:
            timer = self._timer
            self._timer = None
        if timer is not None:
            timer.cancel()


class SchemaFolderWatcher:
    def __init__(
        self,
        schemas_dir: str | Path,
        callback: Callable[[Path], Awaitable[None]],
        debounce_seconds: float = 0.5,
    ) -> None:
        self._schemas_dir = Path(schemas_dir)
        self._callback = callback
        self._debounce_seconds = debounce_seconds
        self._queue: asyncio.Queue[Path] | None = None
        self._handler: DebouncedSchemaHandler | None = None
        self._observer: Observer | None = None
        self._consumer_task: asyncio.Task[None] | None = None

    async def _consume(self) -> None:
        assert self._queue is not None
        while True:
            path = await self._queue.get()
            try:
                await self._callback(path)
            except Exception:  # pragma: no cover
                LOGGER.exception("Schema watcher callback failed after change to %s", path)
            finally:
                self._queue.task_done()

    async def start(self) -> None:
        if self._observer is not None:
            return
        if not self._schemas_dir.is_dir():
            raise ValueError(f"Schemas directory does not exist or is not a directory: {self._schemas_dir}")

        loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._handler = DebouncedSchemaHandler(
            loop=loop,
            queue=self._queue,
            debounce_seconds=self._debounce_seconds,
        )

        observer = Observer()
        observer.schedule(self._handler, str(self._schemas_dir), recursive=False)
        observer.start()
        self._observer = observer
        self._consumer_task = asyncio.create_task(self._consume())

    def stop(self) -> None:
        observer = self._observer
        if observer is not None:
            observer.stop()
            observer.join(timeout=5.0)
            self._observer = None

        if self._handler is not None:
            self._handler.close()
            self._handler = None

        if self._consumer_task is not None:
            self._consumer_task.cancel()
            self._consumer_task = None
