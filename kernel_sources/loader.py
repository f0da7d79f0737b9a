from __future__ import annotations
import importlib
from typing import Any, Dict

from kernel_sources.registry import lookup_kernel


KERNEL_ROOT = "kernel_sources"


def _module_name(backend: str, fractal: str) -> str:
    return f"{KERNEL_ROOT}.{backend.lower()}.{fractal.lower()}"


def load_kernel(fractal: str, operation: str = "rows", backend: str = "CPU") -> Dict[str, Any]:
    """
    Import the kernel module by convention (kernel_sources/<backend>/<fractal>.py),
    which registers itself on import, and return its metadata.
    """
    try:
        meta = lookup_kernel(fractal, operation, backend)
    except KeyError:
        importlib.import_module(_module_name(backend, fractal))
        meta = lookup_kernel(fractal, operation, backend)
    _validate_meta(meta, f"registry[{fractal}.{operation}:{backend}]")
    return meta


def _validate_meta(meta: Dict[str, Any], where: str) -> None:
    if "func" not in meta:
        raise KeyError(f"{where} must provide 'func'")
    if "arg_order" not in meta or not isinstance(meta["arg_order"], (list, tuple)):
        raise KeyError(f"{where} must provide an 'arg_order' list")
