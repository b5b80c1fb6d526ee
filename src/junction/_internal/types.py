"""Shared type aliases used across junction modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler, called as handler(request, output); may be sync or async
Handler: TypeAlias = Callable[..., Any]

# Startup hook: zero-argument, sync or async
Hook: TypeAlias = Callable[[], Any]
