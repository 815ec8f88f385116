from __future__ import annotations

import logging
import time
import traceback
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class ErrorItem:
    first_ts: float
    last_ts: float
    context: str
    message: str
    tb: str | None
    count: int = 1


class ErrorLog:
    """
    Frame-loop failure feed keyed by `(context, message)`.

    Ground probes and clip pools fail the same way on every tick, often interleaved with
    each other. Each distinct failure is logged (and persisted) once; later reports only
    bump its counter, wherever they arrive in the frame sequence.
    """

    def __init__(self, *, max_items: int = 30, persist_path: Path | None = None) -> None:
        self._max_items = max(1, int(max_items))
        self._items: dict[tuple[str, str], ErrorItem] = {}
        self._persist_path = Path(persist_path) if persist_path is not None else None

    def items(self) -> list[ErrorItem]:
        return list(self._items.values())

    def count(self, *, context: str) -> int:
        return sum(it.count for it in self._items.values() if it.context == context)

    def clear(self) -> None:
        self._items.clear()

    def log_message(self, *, context: str, message: str) -> None:
        self._record(context=context, message=message, tb=None)

    def log_exception(self, *, context: str, exc: BaseException) -> None:
        msg = f"{type(exc).__name__}: {exc}".strip()
        tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        self._record(context=context, message=msg, tb=tb)

    def _record(self, *, context: str, message: str, tb: str | None) -> None:
        context = str(context or "unknown")
        message = str(message or "").strip() or "Unknown error"
        key = (context, message)
        now = time.time()
        item = self._items.get(key)
        if item is not None:
            item.last_ts = now
            item.count += 1
            return

        self._items[key] = ErrorItem(first_ts=now, last_ts=now, context=context, message=message, tb=tb)
        # Oldest distinct failures drop out first; a dropped key logs again if it comes back.
        while len(self._items) > self._max_items:
            self._items.pop(next(iter(self._items)))
        if tb:
            logger.error("%s: %s\n%s", context, message, tb.rstrip())
        else:
            logger.error("%s: %s", context, message)
        self._persist(context=context, message=message, tb=tb)

    def _persist(self, *, context: str, message: str, tb: str | None) -> None:
        p = self._persist_path
        if p is None:
            return
        stamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
        lines = [f"[{stamp}] {context}: {message}"]
        if tb:
            lines.append(tb.rstrip())
        lines.append("")
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            with p.open("a", encoding="utf-8") as fh:
                fh.write("\n".join(lines))
        except OSError:
            logger.warning("Could not append to error log file %s", p)
