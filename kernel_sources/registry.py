from __future__ import annotations
from typing import Any, Dict, List

# [fractal][op_name][backend] -> {"func": ..., "arg_order": [...], ...}
_REGISTRY: Dict[str, Dict[str, Dict[str, Dict[str, Any]]]] = {}


def register_kernel(fractal: str, op_name: str, backend: str, **meta: Any) -> None:
    """
    Called by a kernel module at import time, e.g.
        register_kernel("julia", "rows", "CPU", func=julia_row, arg_order=[...])
    Re-registering the same key replaces the previous entry.
    """
    _REGISTRY.setdefault(fractal.lower(), {}).setdefault(op_name, {})[backend.upper()] = meta


def lookup_kernel(fractal: str, op_name: str, backend: str) -> Dict[str, Any]:
    be = backend.upper()
    try:
        return _REGISTRY[fractal.lower()][op_name][be]
    except KeyError as e:
        raise KeyError(f"Kernel not found for fractal='{fractal}', op='{op_name}', backend='{be}'") from e


def list_kernels(fractal: str, backend: str) -> List[str]:
    """Sorted operation names registered for the fractal on this backend."""
    be = backend.upper()
    ops = _REGISTRY.get(fractal.lower(), {})
    return sorted(op for op, backends in ops.items() if be in backends)
