# app/helpers/revalidation.py
import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

# Callables taking a single path such as "/dashboard/assets/42"
_listeners: List[Callable[[str], None]] = []


def register_listener(listener: Callable[[str], None]):
    _listeners.append(listener)
    return listener


def clear_listeners():
    _listeners.clear()


def revalidate_paths(*paths: str):
    """
    Tell every registered view cache that the given paths are stale.
    Listener failures never reach the caller.
    """
    for path in paths:
        if not _listeners:
            logger.debug("Revalidate %s (no listeners)", path)
            continue
        for listener in list(_listeners):
            try:
                listener(path)
            except Exception:
                logger.exception("Revalidation listener failed for %s", path)
