import functools
import inspect
import time
from typing import Any, Callable, Dict, List, Tuple, TypeVar, cast

from npmplus.logger import session_logger

F = TypeVar("F", bound=Callable[..., Any])

_MAX_ARG_LENGTH = 1000


def _truncate(value: Any) -> str:
    text = str(value)
    if len(text) > _MAX_ARG_LENGTH:
        return text[:_MAX_ARG_LENGTH] + "...(truncated)"
    return text


def _safe_arguments(args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Tuple[List[str], Dict[str, str]]:
    return [_truncate(a) for a in args], {k: _truncate(v) for k, v in kwargs.items()}


def log_execution_time(func: F) -> F:
    """Decorator to log execution time and arguments of a function.

    Works on plain functions and coroutine functions alike.

    Logs:
    - Start of execution with arguments (truncated if too large)
    - End of execution with duration
    - Exceptions if they occur
    """
    func_name = func.__name__

    def _failed(start_time: float, e: Exception) -> None:
        session_logger.error(
            f"Failed {func_name}",
            duration_seconds=round(time.perf_counter() - start_time, 4),
            error=str(e),
            error_type=type(e).__name__,
            success=False,
        )

    def _completed(start_time: float) -> None:
        session_logger.info(
            f"Completed {func_name}",
            duration_seconds=round(time.perf_counter() - start_time, 4),
            success=True,
        )

    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            safe_args, safe_kwargs = _safe_arguments(args, kwargs)
            session_logger.debug(f"Starting {func_name}", args=safe_args, kwargs=safe_kwargs)
            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                _failed(start_time, e)
                raise
            _completed(start_time)
            return result

        return cast(F, async_wrapper)

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        safe_args, safe_kwargs = _safe_arguments(args, kwargs)
        session_logger.debug(f"Starting {func_name}", args=safe_args, kwargs=safe_kwargs)
        start_time = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            _failed(start_time, e)
            raise
        _completed(start_time)
        return result

    return cast(F, wrapper)
