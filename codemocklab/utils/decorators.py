import time
from functools import wraps
from loguru import logger


def log_execution_time(func):
    """Log how long a long-running service call took, including failures."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        started = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(
                f"{func.__qualname__} failed after {time.perf_counter() - started:.2f}s: {str(e)}"
            )
            raise
        logger.info(f"{func.__qualname__} finished in {time.perf_counter() - started:.2f}s")
        return result

    return wrapper
