"""
Time-bounded calls across the persistence/conversion boundary.

Store operations are blocking file I/O. ``call_with_timeout`` runs one on a
daemon worker thread and waits for it under ``asyncio.wait_for`` so a stuck
call surfaces as BoundaryTimeout instead of hanging the session. The worker
is never joined: neither ``asyncio.run`` nor interpreter exit waits for an
abandoned call. There is no retry: the caller keeps its in-memory state and
may simply try again.
"""

import asyncio
import threading
from concurrent.futures import Future
from typing import Any, Callable

from ..core.config import BOUNDARY_TIMEOUT_SECONDS
from .serializers import ValidationError


class BoundaryError(Exception):
    """A persistence or conversion call failed; in-memory state is unchanged."""


class BoundaryTimeout(BoundaryError):
    """The call did not finish within its deadline."""


class PersistenceError(BoundaryError):
    """The store rejected the call."""


async def call_with_timeout(
    fn: Callable[..., Any],
    *args: Any,
    timeout: float = BOUNDARY_TIMEOUT_SECONDS,
    label: str = "operation",
) -> Any:
    """
    Run a blocking boundary call with a deadline.

    Args:
        fn: Blocking callable (store method)
        *args: Positional arguments for fn
        timeout: Deadline in seconds
        label: Operation name used in error messages

    Returns:
        Whatever fn returns

    Raises:
        BoundaryTimeout: If the deadline passes
        PersistenceError: If fn raises OSError (including a missing plan)
            or ValidationError
    """
    done: Future = Future()

    def _worker() -> None:
        if not done.set_running_or_notify_cancel():
            return
        try:
            done.set_result(fn(*args))
        except BaseException as e:
            done.set_exception(e)

    threading.Thread(target=_worker, name=f"boundary-{label}", daemon=True).start()
    try:
        return await asyncio.wait_for(asyncio.wrap_future(done), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise BoundaryTimeout(f"{label} timed out after {timeout:g}s") from e
    except (OSError, ValidationError) as e:
        raise PersistenceError(f"{label} failed: {e}") from e
