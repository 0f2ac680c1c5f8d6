"""Run blocking work off the GLib main loop.

Store searches, thumbnail downloads and image resizes block for seconds.
``run_in_background`` runs them on a daemon thread and hands the outcome
back to the main loop with ``GLib.idle_add``, so callbacks that mutate the
``GameCollection`` always run one at a time on the main context.  Tasks
may finish in any order.

Usage::

    run_in_background(
        prepare_game, name, exe,
        on_done=collection.add,
        on_error=lambda exc: toast(str(exc)),
    )
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from gi.repository import GLib

log = logging.getLogger(__name__)


def run_in_background(
    func: Callable[..., Any],
    *args: Any,
    on_done: Callable[[Any], None],
    on_error: Callable[[Exception], None] | None = None,
    **kwargs: Any,
) -> threading.Thread:
    """Call ``func(*args, **kwargs)`` on a worker thread.

    *on_done* receives the return value, *on_error* the raised exception;
    both run on the main loop.  Without *on_error* the failure is logged.
    """

    def _deliver(callback: Callable[[Any], None], value: Any) -> bool:
        callback(value)
        return GLib.SOURCE_REMOVE

    def _run() -> None:
        try:
            result = func(*args, **kwargs)
        except Exception as exc:  # noqa: BLE001
            if on_error is not None:
                GLib.idle_add(_deliver, on_error, exc)
            else:
                log.error("Background task %s failed: %s", _name(func), exc)
            return
        GLib.idle_add(_deliver, on_done, result)

    thread = threading.Thread(target=_run, name=_name(func), daemon=True)
    thread.start()
    return thread


def _name(func: Callable[..., Any]) -> str:
    return getattr(func, "__name__", repr(func))
