"""Background execution of store I/O with a single serialised writer."""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional, TypeVar

from closet_app.logging_config import log_event

LOGGER = logging.getLogger(__name__)
T = TypeVar("T")

Dispatcher = Callable[[Callable[[], None]], None]


def run_inline(handler: Callable[[], None]) -> None:
    handler()


class StoreExecutor:
    """Run store calls off the caller's thread.

    Reads go to a pool of ``readers`` threads. Writes go to one dedicated
    thread, so mutations reach the store in submission order. Completion
    callbacks are handed to ``dispatch``; the default runs them on the worker
    thread that finished the call. Pass e.g. an event loop's
    ``call_soon_threadsafe`` to run them on the caller's loop instead.
    """

    def __init__(self, readers: int = 2, dispatch: Optional[Dispatcher] = None) -> None:
        if readers < 1:
            raise ValueError("readers must be at least 1")
        self._readers = ThreadPoolExecutor(max_workers=readers, thread_name_prefix="closet-store-read")
        self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="closet-store-write")
        self._dispatch = dispatch or run_inline

    def _submit(
        self,
        pool: ThreadPoolExecutor,
        kind: str,
        fn: Callable[..., T],
        args: tuple,
        kwargs: dict,
        callback: Optional[Callable[["Future[T]"], Any]],
    ) -> "Future[T]":
        future = pool.submit(fn, *args, **kwargs)
        name = getattr(fn, "__name__", repr(fn))

        def _on_done(done: "Future[T]") -> None:
            if not done.cancelled() and done.exception() is not None:
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "store_call_failed",
                    kind=kind,
                    call=name,
                    error_type=type(done.exception()).__name__,
                )
            if callback is not None:
                self._dispatch(lambda: callback(done))

        future.add_done_callback(_on_done)
        return future

    def submit_read(
        self,
        fn: Callable[..., T],
        *args: Any,
        callback: Optional[Callable[["Future[T]"], Any]] = None,
        **kwargs: Any,
    ) -> "Future[T]":
        return self._submit(self._readers, "read", fn, args, kwargs, callback)

    def submit_write(
        self,
        fn: Callable[..., T],
        *args: Any,
        callback: Optional[Callable[["Future[T]"], Any]] = None,
        **kwargs: Any,
    ) -> "Future[T]":
        return self._submit(self._writer, "write", fn, args, kwargs, callback)

    def shutdown(self, wait: bool = True, cancel_pending: bool = False) -> None:
        self._writer.shutdown(wait=wait, cancel_futures=cancel_pending)
        self._readers.shutdown(wait=wait, cancel_futures=cancel_pending)

    def __enter__(self) -> "StoreExecutor":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()


__all__ = ["StoreExecutor", "run_inline"]
