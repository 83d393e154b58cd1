import functools
import logging
import asyncio

logger = logging.getLogger(__name__)

def retry_on_exception(retries=3, delay=2, exceptions=(Exception,)):
    """Повторить корутину при перечисленных исключениях, затем пробросить последнее"""
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            for attempt in range(1, retries + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    logger.warning(f"Попытка {attempt}/{retries} для {func.__name__}: {e}")
                    if attempt >= retries:
                        raise
                    await asyncio.sleep(delay)
        return wrapper
    return decorator

def log_and_default(default_factory):
    """Getter-политика: ошибка логируется, возвращается значение по умолчанию"""
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logging.getLogger(func.__module__).error(f"Error in {func.__name__}: {e}")
                return default_factory()
        return wrapper
    return decorator

def log_and_raise(func):
    """Writer-политика: ошибка логируется и пробрасывается"""
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            logging.getLogger(func.__module__).error(f"Error in {func.__name__}: {e}")
            raise
    return wrapper
