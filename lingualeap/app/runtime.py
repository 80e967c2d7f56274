from __future__ import annotations

import logging
import threading
from typing import Callable, TypeVar

from lingualeap.ai.base import LLMFlowError
from lingualeap.app.diagnostics import summarize_exception

R = TypeVar("R")


def run_ai_job(
    job: Callable[[], R],
    *,
    dispatch: Callable[[Callable[[], None]], None],
    on_done: Callable[[R], None],
    on_error: Callable[[str], None],
    logger: logging.Logger | None = None,
    name: str = "lingualeap-ai-job",
) -> threading.Thread:
    """
    Run a blocking LLM call off the UI thread. The result (or a one-line
    error summary) is handed back through `dispatch`, so callbacks run on
    whichever thread drains the dispatch queue.
    """

    def _entry() -> None:
        try:
            result = job()
        except LLMFlowError as e:
            detail = summarize_exception(str(e))
            dispatch(lambda: on_error(detail))
            return
        except Exception as e:
            if logger is not None:
                logger.exception("ai_job_crash", extra={"job": name})
            detail = summarize_exception(f"{type(e).__name__}: {e}")
            dispatch(lambda: on_error(detail))
            return
        dispatch(lambda: on_done(result))

    thread = threading.Thread(target=_entry, name=name, daemon=True)
    thread.start()
    return thread
