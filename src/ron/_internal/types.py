"""Shared type aliases used across ron modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler: receives a Context, may return a Response or None
Handler: TypeAlias = Callable[..., Any]

# Error handler: receives (request, error?) and returns a response value
ErrorHandler: TypeAlias = Callable[..., Any]
