"""Fault conversion that never swallows Ctrl-C.

Dependency iteration and jar extraction turn arbitrary faults into build
errors. ``reraise_as`` does that conversion while letting KeyboardInterrupt
(and any explicitly listed exception types) through untouched.
"""

import _thread
import threading
from contextlib import contextmanager
from typing import Iterator, Tuple, Type

from .errors import IkvmBuildError


@contextmanager
def reraise_as(
    error_type: Type[IkvmBuildError],
    message: str,
    passthrough: Tuple[Type[BaseException], ...] = ()
) -> Iterator[None]:
    """Convert faults raised inside the block into ``error_type``.

    Usage:
        with reraise_as(ExtractionError, f"Error extracting classes from: {jar}"):
            extract(jar)

    Args:
        error_type: Build error raised in place of the original fault
        message: Prefix of the new error's message; the fault text follows
        passthrough: Exception types re-raised unchanged

    Raises:
        KeyboardInterrupt: Re-raised as-is. Off the main thread the main
            thread is interrupted as well.
    """
    try:
        yield
    except KeyboardInterrupt:
        if threading.current_thread() is not threading.main_thread():
            _thread.interrupt_main()
        raise
    except passthrough:
        raise
    except Exception as e:
        raise error_type(f"{message}: {e}") from e
