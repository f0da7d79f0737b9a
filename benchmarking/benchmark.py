"""
Benchmark the banded CPU renderer across resolutions and worker counts.

Usage examples:
  python -m benchmarking.benchmark --res 800x600,1280x720 --workers 1,4,8 --runs 5
  python -m benchmarking.benchmark --fractal julia --max-iter 1000 --csv julia.csv
"""

import os
import csv
import time
import argparse
import platform
from typing import List, Optional, Tuple

from fractals.base import FractalSettings, Viewport
from rendering.core import RenderRequest
from rendering.executor import BandExecutor
from utils.enums import ColorScheme, FractalKind

# --- Helpers -----------------------------------------------------------------

def parse_resolution_list(res_str: str) -> List[Tuple[int, int]]:
    """
    Parse resolutions like "800x600,1280x720".
    """
    if not res_str:
        return [(800, 600), (1280, 720), (1920, 1080)]
    out: List[Tuple[int, int]] = []
    for token in res_str.split(','):
        token = token.strip().lower()
        if not token:
            continue
        w, h = token.split('x')
        out.append((int(w), int(h)))
    return out


def parse_worker_list(workers_str: str) -> List[int]:
    if not workers_str:
        n = os.cpu_count() or 1
        return sorted({1, n})
    return [max(1, int(t)) for t in workers_str.split(',') if t.strip()]


def benchmark_combo(executor: BandExecutor, settings: FractalSettings,
                    width: int, height: int, runs: int, warmup: int) -> Tuple[float, float]:
    vp = Viewport(width=width, height=height)
    request = RenderRequest.build(vp, settings)
    for _ in range(warmup):
        executor.render(request)
    times = []
    for _ in range(runs):
        t0 = time.perf_counter()
        executor.render(request)
        times.append(time.perf_counter() - t0)
    avg = sum(times) / max(1, len(times))
    fps = 1.0 / avg if avg > 0 else 0.0
    return avg, fps


def write_csv_row(writer, res: Tuple[int, int],
                  results: List[Tuple[int, Optional[Tuple[float, float]]]]) -> None:
    row = [f"{res[0]}x{res[1]}"]
    for _workers, r in results:
        if r is None:
            row.extend(["FAIL", "FAIL"])
        else:
            row.extend([f"{r[0]:.4f}", f"{r[1]:.2f}"])
    writer.writerow(row)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Benchmark the banded fractal renderer.")
    p.add_argument("--res", default="", help="Comma separated WxH list.")
    p.add_argument("--workers", default="", help="Comma separated band counts.")
    p.add_argument("--fractal", default="mandelbrot", help="mandelbrot | julia")
    p.add_argument("--color", default="rainbow", help="Color scheme name.")
    p.add_argument("--max-iter", type=int, default=None,
                   help="Fixed iteration bound (default: zoom dependent).")
    p.add_argument("--runs", type=int, default=3)
    p.add_argument("--warmup", type=int, default=1)
    p.add_argument("--csv", default="benchmark_results.csv")
    return p


def main(argv=None):
    args = build_arg_parser().parse_args(argv)
    resolutions = parse_resolution_list(args.res)
    worker_counts = parse_worker_list(args.workers)
    settings = FractalSettings(
        fractal=FractalKind.parse(args.fractal) or FractalKind.MANDELBROT,
        color_scheme=ColorScheme.parse(args.color) or ColorScheme.RAINBOW,
        max_iter=args.max_iter,
    )

    cpu_info = platform.processor() or platform.machine()
    print("=== Hardware Summary ===")
    print("CPU:", cpu_info, f"({os.cpu_count()} logical cores)")
    print()

    executor = BandExecutor(max_workers=max(worker_counts))
    try:
        if os.path.exists(args.csv):
            os.remove(args.csv)
        with open(args.csv, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(["Hardware Summary"])
            writer.writerow(["CPU", cpu_info])
            writer.writerow([])

            header = ["Resolution"]
            for n in worker_counts:
                header.extend([f"{n} bands Time (s)", f"{n} bands FPS"])
            writer.writerow(header)

            print(f"Settings: fractal={settings.fractal.name}, color={settings.color_scheme.name}, "
                  f"max_iter={args.max_iter or 'auto'}")
            print()

            for (w, h) in resolutions:
                print(f"=== {w}x{h} ===")
                row_results = []
                for n in worker_counts:
                    settings.workers = n
                    try:
                        avg, fps = benchmark_combo(executor, settings, w, h,
                                                   args.runs, args.warmup)
                        print(f"{n:>4} bands  avg={avg:.4f}s  fps={fps:.2f}")
                        row_results.append((n, (avg, fps)))
                    except Exception as e:
                        print(f"{n:>4} bands  FAIL: {e}")
                        row_results.append((n, None))
                write_csv_row(writer, (w, h), row_results)
                print()
    finally:
        executor.close()

    print(f"Benchmark results saved to {args.csv}")


if __name__ == "__main__":
    main()
