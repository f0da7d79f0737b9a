# Row kernels, registered per fractal and backend on first import
from .loader import load_kernel
from .registry import register_kernel, lookup_kernel, list_kernels

__all__ = ["load_kernel", "register_kernel", "lookup_kernel", "list_kernels"]
__version__ = "0.3.0"
