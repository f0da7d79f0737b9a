from numba import njit

from kernel_sources.registry import register_kernel


ARG_ORDER = ["xs", "ci", "kr", "ki", "max_iter", "out"]


@njit(cache=True, nogil=True)
def mandelbrot_row(xs, ci, kr, ki, max_iter, out):
    """
    Escape-time counts for one pixel row: z <- z^2 + c from z = 0.
    kr/ki are unused; the signature matches the Julia row kernel.
    """
    for x in range(xs.shape[0]):
        cr = xs[x]
        zr = 0.0
        zi = 0.0
        n = 0
        while n < max_iter and zr * zr + zi * zi < 4.0:
            zr, zi = zr * zr - zi * zi + cr, zr * zi + zi * zr + ci
            n += 1
        out[x] = n


register_kernel(
    fractal="mandelbrot",
    op_name="rows",
    backend="CPU",
    func=mandelbrot_row,
    arg_order=ARG_ORDER,
)
