import functools
import logging
import time
import warnings
from typing import Callable

from cachetools.func import ttl_cache

logger = logging.getLogger("mediator.performance")


def time_it(func):
    """Decorator to measure execution time of async functions"""

    @functools.wraps(func)
    async def async_wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        try:
            return await func(*args, **kwargs)
        finally:
            execution_time = time.perf_counter() - start_time
            logger.debug(f"{func.__name__} completed in {execution_time:.2f} seconds")

    return async_wrapper


def setup_logs(level=logging.DEBUG):
    warnings.simplefilter("default")
    logging.getLogger("mediator").setLevel(level)
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")


loggers: dict[int, Callable] = {}


def ratelimited_log(delay_or_fn: int | Callable, msg=None):
    """Log the same message at most once every `delay` seconds (default 60).

    ratelimited_log(logger.error, "boom")  # log now
    ratelimited_log(300)(logger.error, "boom")  # custom delay
    """
    if callable(delay_or_fn):
        logger_method = delay_or_fn
        delay = 60
    else:
        delay = delay_or_fn
        logger_method = None

    if delay not in loggers:

        @ttl_cache(ttl=delay)
        def call(logger_method, message):
            logger_method(message)

        loggers[delay] = call

    if logger_method is not None:
        return loggers[delay](logger_method, msg)
    return loggers[delay]
