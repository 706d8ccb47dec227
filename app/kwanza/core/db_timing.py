from __future__ import annotations

import time
from contextvars import ContextVar
from dataclasses import dataclass

from sqlalchemy import event
from sqlalchemy.engine import Engine


@dataclass
class RequestDbTimer:
    elapsed_ms: float = 0.0


# mutated in place: sync routes run in a copied context on the threadpool
_request_timer: ContextVar[RequestDbTimer | None] = ContextVar("request_db_timer", default=None)


def begin_request_timing() -> tuple[RequestDbTimer, object]:
    timer = RequestDbTimer()
    return timer, _request_timer.set(timer)


def end_request_timing(token: object) -> None:
    _request_timer.reset(token)


def instrument_engine(engine: Engine) -> None:
    @event.listens_for(engine, "before_cursor_execute")
    def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        if _request_timer.get() is not None:
            conn.info["kwanza_query_started"] = time.perf_counter()

    @event.listens_for(engine, "after_cursor_execute")
    def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        started = conn.info.pop("kwanza_query_started", None)
        timer = _request_timer.get()
        if started is not None and timer is not None:
            timer.elapsed_ms += (time.perf_counter() - started) * 1000
