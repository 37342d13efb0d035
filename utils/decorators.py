"""
Decorators for page handler actions and derived-state functions.

This module provides decorators that add consistent logging, loading-state
tracking, error-to-message conversion, role checks, in-flight guarding and
identity memoization to the handlers and aggregation functions.
"""

import threading
import time
from functools import wraps
from typing import Any, Callable, Dict, Optional, Tuple

from services.exceptions import (ActionInProgress, AuthorizationError,
                                 ConfirmationDeclined, ShopClientError)

from .logging import log_error, setup_logger
from .messages import translate

_in_flight_lock = threading.Lock()


def view_action(
    success: Optional[str] = None,
    logger_name: Optional[str] = None,
    track_loading: bool = True,
) -> Callable:
    """
    Decorator for handler methods that provides:
    - Loading flag toggled around the call and cleared on every exit path
    - Execution time logging
    - Conversion of client errors into the handler's error message
    - An optional success message on completion

    The decorated method's owner must expose a ``state`` attribute
    (see ``handlers.base.ViewState``).

    Args:
        success: Message key shown when the action completes
        logger_name: Logger name (defaults to the function module name)
        track_loading: Whether the action toggles the loading flag

    Returns:
        Decorated function
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(self, *args: Any, **kwargs: Any) -> Any:
            logger = setup_logger(logger_name or func.__module__)
            state = self.state
            state.clear()
            start_time = time.time()

            with state.track(enabled=track_loading):
                try:
                    result = func(self, *args, **kwargs)
                except (ConfirmationDeclined, ActionInProgress) as e:
                    logger.info(
                        "Action skipped",
                        extra={"action": func.__name__, "reason": str(e)},
                    )
                    return None
                except AuthorizationError as e:
                    logger.warning(
                        "Action not permitted",
                        extra={"action": func.__name__, "status_code": e.status_code},
                    )
                    state.deny(e.message)
                    return None
                except ShopClientError as e:
                    log_error(
                        logger,
                        e,
                        {
                            "action": func.__name__,
                            "execution_time_ms": (time.time() - start_time) * 1000,
                        },
                    )
                    state.fail(e.message)
                    return None

            logger.info(
                "Action completed",
                extra={
                    "action": func.__name__,
                    "execution_time_ms": (time.time() - start_time) * 1000,
                },
            )
            if success:
                state.succeed(translate(success))
            return result

        return wrapper

    return decorator


def require_role(*roles: str) -> Callable:
    """
    Decorator that ensures the handler's session is active and holds a role.

    Args:
        roles: Accepted role values; empty means any logged-in user

    Returns:
        Decorated function
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(self, *args: Any, **kwargs: Any) -> Any:
            session = getattr(self, "session", None)
            if session is None or not session.active:
                raise AuthorizationError(translate("login_required"))
            if roles and not session.has_role(*roles):
                raise AuthorizationError(translate("not_permitted"))
            return func(self, *args, **kwargs)

        return wrapper

    return decorator


def single_flight(func: Callable) -> Callable:
    """
    Decorator that rejects a second trigger of an action while the first is in flight.

    The owner exposes the set of running actions as ``in_flight`` so a UI
    can disable the corresponding control.
    """

    @wraps(func)
    def wrapper(self, *args: Any, **kwargs: Any) -> Any:
        name = func.__name__
        with _in_flight_lock:
            running = self.__dict__.setdefault("in_flight", set())
            if name in running:
                raise ActionInProgress(name)
            running.add(name)
        try:
            return func(self, *args, **kwargs)
        finally:
            with _in_flight_lock:
                running.discard(name)

    return wrapper


def memoize_by_identity(func: Callable) -> Callable:
    """
    Cache the last result of a pure function, keyed by the identity of its inputs.

    Inputs are expected to be immutable snapshots (tuples of frozen models),
    so a new snapshot is a new object and recomputes. The cached arguments are
    kept alive so their ids cannot be reused by other objects.
    """
    cache: Dict[str, Tuple[Tuple, Tuple, Any]] = {}
    lock = threading.Lock()

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        key = tuple(id(arg) for arg in args) + tuple(
            (name, id(value)) for name, value in sorted(kwargs.items())
        )
        with lock:
            hit = cache.get("last")
        if hit is not None and hit[0] == key:
            return hit[2]

        result = func(*args, **kwargs)
        with lock:
            cache["last"] = (key, (args, kwargs), result)
        return result

    wrapper.cache_clear = cache.clear
    return wrapper
