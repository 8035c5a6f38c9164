"""
books_engines.tracer -- one BOOKS_ENGINE_TRACE record per engine call.

``@traced_engine`` logs which engine ran, on what input and how long it
took.  The input is identified by a fingerprint: a 16-character SHA-256
prefix over the canonical form of the named arguments, so two calls with
the same rows produce the same fingerprint regardless of dict ordering or
of whether the arguments were passed by position or keyword.

The tracer only logs; it never alters arguments or results.
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import time
from collections.abc import Callable, Mapping
from datetime import date
from enum import Enum
from typing import Any

from books_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

TRACE_EVENT = "BOOKS_ENGINE_TRACE"


def _canonicalize(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, date):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    if isinstance(value, Mapping):
        parts = sorted(f"{k}:{_canonicalize(v)}" for k, v in value.items())
        return "{" + ",".join(parts) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """Fingerprint of ``arguments[name]`` for each name; absent names hash as null."""
    canonical = "|".join(
        f"{name}={_canonicalize(arguments.get(name))}" for name in fingerprint_fields
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """
    Decorate a pure engine function with trace logging.

    Args:
        engine_name: Engine identifier, e.g. ``"aging"``.
        engine_version: Version of the engine's rules, e.g. ``"1.0"``.
        fingerprint_fields: Parameter names hashed into the fingerprint.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            started = time.monotonic()
            result = func(*args, **kwargs)
            elapsed_ms = round((time.monotonic() - started) * 1000, 2)

            extra: dict[str, Any] = {
                "trace_type": TRACE_EVENT,
                "engine_name": engine_name,
                "engine_version": engine_version,
                "input_fingerprint": fingerprint,
                "duration_ms": elapsed_ms,
                "function": func.__qualname__,
            }
            if isinstance(result, (list, tuple, dict)):
                extra["result_size"] = len(result)
            _logger.info(TRACE_EVENT, extra=extra)
            return result

        return wrapper

    return decorator
