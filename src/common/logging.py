import logging
import time
from functools import wraps
from typing import Callable, Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Storage writes slower than this are reported at WARNING
SLOW_CALL_SECONDS = 0.5

def setup_logger(name: str, level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Attaches a stream handler with the standard format to `name`.
    Level may be a number or a name such as "DEBUG".
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    return logger

def log_execution_time(logger: logging.Logger, slow_after: float = SLOW_CALL_SECONDS):
    """
    Decorator that logs how long each call took, at WARNING once it
    exceeds `slow_after` seconds. Exceptions are logged and re-raised.
    """
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(f"{func.__name__} failed: {e}", exc_info=True)
                raise
            elapsed = time.perf_counter() - start
            if elapsed > slow_after:
                logger.warning(f"{func.__name__} took {elapsed:.3f}s")
            else:
                logger.debug(f"{func.__name__} executed in {elapsed:.3f}s")
            return result
        return wrapper
    return decorator
