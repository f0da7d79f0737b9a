from numba import njit

from kernel_sources.registry import register_kernel


ARG_ORDER = ["xs", "ci", "kr", "ki", "max_iter", "out"]


@njit(cache=True, nogil=True)
def julia_row(xs, ci, kr, ki, max_iter, out):
    """
    Escape-time counts for one pixel row: z <- z^2 + k seeded with the
    pixel coordinate, k = kr + ki*i.
    """
    for x in range(xs.shape[0]):
        zr = xs[x]
        zi = ci
        n = 0
        while n < max_iter and zr * zr + zi * zi < 4.0:
            zr, zi = zr * zr - zi * zi + kr, zr * zi + zi * zr + ki
            n += 1
        out[x] = n


register_kernel(
    fractal="julia",
    op_name="rows",
    backend="CPU",
    func=julia_row,
    arg_order=ARG_ORDER,
)
