"""Bounded execution of calls to external collaborators."""

import logging
from concurrent.futures import Executor, TimeoutError
from typing import Any, Callable, Optional

from .exceptions import DependencyTimeout

logger = logging.getLogger(__name__)


def bounded(executor: Executor, timeout: Optional[float],
            func: Callable, *args: Any, **kwargs: Any) -> Any:
    """
    Run ``func`` on ``executor``, waiting at most ``timeout`` seconds.

    Exceptions raised by ``func`` propagate unchanged. The worker thread
    cannot be interrupted, so a call that times out may still complete in the
    background; its result is discarded.

    Raises
    ------
    :class:`DependencyTimeout`
        Raised if ``func`` does not return within ``timeout``.

    """
    future = executor.submit(func, *args, **kwargs)
    try:
        return future.result(timeout=timeout)
    except TimeoutError as e:
        future.cancel()
        name = getattr(func, '__qualname__', repr(func))
        logger.warning('Call to %s exceeded %s seconds', name, timeout)
        raise DependencyTimeout(f'{name} timed out after {timeout}s') from e
