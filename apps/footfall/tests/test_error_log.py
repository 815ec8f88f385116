from __future__ import annotations

import logging
from pathlib import Path

from footfall.common.error_log import ErrorLog


def _raise_and_log(log: ErrorLog, *, context: str, exc: Exception) -> None:
    try:
        raise exc
    except Exception as e:
        log.log_exception(context=context, exc=e)


def test_interleaved_failures_are_logged_once_each(caplog) -> None:
    log = ErrorLog(max_items=10)

    with caplog.at_level(logging.ERROR, logger="footfall.common.error_log"):
        for _ in range(10):
            _raise_and_log(log, context="footfall.ground_probe", exc=RuntimeError("probe offline"))
            log.log_message(context="footfall.audio.step", message="No clips available in pool 'step'")

    items = log.items()
    assert [it.context for it in items] == ["footfall.ground_probe", "footfall.audio.step"]
    assert [it.count for it in items] == [10, 10]
    assert "RuntimeError: probe offline" in items[0].message
    assert items[0].tb is not None and "RuntimeError" in items[0].tb
    assert items[1].tb is None
    assert len(caplog.records) == 2
    assert log.count(context="footfall.ground_probe") == 10


def test_same_context_with_new_message_is_a_new_item() -> None:
    log = ErrorLog()
    log.log_message(context="footfall.audio.load.step", message="Loader returned no sound for step_0.wav")
    log.log_message(context="footfall.audio.load.step", message="Loader returned no sound for step_1.wav")
    log.log_message(context="footfall.audio.load.step", message="Loader returned no sound for step_0.wav")

    assert [it.count for it in log.items()] == [2, 1]
    assert log.count(context="footfall.audio.load.step") == 3


def test_clear_lets_a_known_failure_log_again(caplog) -> None:
    log = ErrorLog()
    with caplog.at_level(logging.ERROR, logger="footfall.common.error_log"):
        log.log_message(context="footfall.audio.landing", message="No clips available in pool 'landing'")
        log.log_message(context="footfall.audio.landing", message="No clips available in pool 'landing'")
        log.clear()
        assert log.items() == []
        log.log_message(context="footfall.audio.landing", message="No clips available in pool 'landing'")

    assert len(caplog.records) == 2
    assert log.items()[0].count == 1


def test_error_log_keeps_most_recent_distinct_failures() -> None:
    log = ErrorLog(max_items=3)
    for i in range(1, 5):
        log.log_message(context=f"c{i}", message=f"m{i}")

    assert [it.context for it in log.items()] == ["c2", "c3", "c4"]


def test_error_log_persists_each_failure_once(tmp_path: Path) -> None:
    out = tmp_path / "logs" / "errors.log"
    log = ErrorLog(max_items=5, persist_path=out)
    for _ in range(3):
        log.log_message(context="footfall.audio.landing", message="No clips available in pool 'landing'")
        _raise_and_log(log, context="footfall.ground_probe", exc=RuntimeError("probe offline"))

    text = out.read_text(encoding="utf-8")
    assert text.count("footfall.audio.landing") == 1
    assert text.count("footfall.ground_probe: RuntimeError: probe offline") == 1
