"""
Stats: small numeric helpers behind the distribution charts.

  quantile / box_stats   quartiles (linear interpolation) and 1.5 IQR fences
  nice_ticks             round-number ticks, used as the violin KDE grid
  epanechnikov           kernel with compact support
  kernel_density         mean kernel weight of a sample at each grid point
"""
import math
from typing import Callable, Optional, Sequence

import numpy as np

FENCE_FACTOR = 1.5

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)


def quantile(values: Sequence[float], p: float) -> Optional[float]:
    """p-quantile with linear interpolation between closest ranks; None when empty."""
    arr = np.asarray(values, dtype=float)
    arr = arr[~np.isnan(arr)]
    if arr.size == 0:
        return None
    return float(np.quantile(arr, min(max(p, 0.0), 1.0)))


def box_stats(values: Sequence[float]) -> Optional[dict]:
    """
    Quartiles, IQR and fences for one group.

    Whiskers sit on the fences (q1 - 1.5 IQR, q3 + 1.5 IQR), not on the most
    extreme data point; values beyond them are reported as outliers.
    """
    arr = np.sort(np.asarray(values, dtype=float))
    arr = arr[~np.isnan(arr)]
    if arr.size == 0:
        return None

    q1 = quantile(arr, 0.25)
    median = quantile(arr, 0.5)
    q3 = quantile(arr, 0.75)
    iqr = q3 - q1
    lower = q1 - FENCE_FACTOR * iqr
    upper = q3 + FENCE_FACTOR * iqr
    return {
        "q1": q1,
        "median": median,
        "q3": q3,
        "iqr": iqr,
        "lower_fence": lower,
        "upper_fence": upper,
        "outliers": [float(v) for v in arr if v < lower or v > upper],
        "values": arr.tolist(),
    }


def _round_half_up(x: float) -> int:
    return math.floor(x + 0.5)


def _tick_increment(start: float, stop: float, count: float):
    step = (stop - start) / max(0, count)
    power = math.floor(math.log10(step))
    error = step / 10 ** power
    if error >= _E10:
        factor = 10
    elif error >= _E5:
        factor = 5
    elif error >= _E2:
        factor = 2
    else:
        factor = 1

    if power < 0:
        inc = 10 ** -power / factor
        i1 = _round_half_up(start * inc)
        i2 = _round_half_up(stop * inc)
        if i1 / inc < start:
            i1 += 1
        if i2 / inc > stop:
            i2 -= 1
        inc = -inc
    else:
        inc = 10 ** power * factor
        i1 = _round_half_up(start / inc)
        i2 = _round_half_up(stop / inc)
        if i1 * inc < start:
            i1 += 1
        if i2 * inc > stop:
            i2 -= 1

    if i2 < i1 and 0.5 <= count < 2:
        return _tick_increment(start, stop, count * 2)
    return i1, i2, inc


def nice_ticks(start: float, stop: float, count: int = 10) -> list[float]:
    """
    About `count` evenly spaced round values (1, 2 or 5 times a power of ten)
    inside [start, stop].
    """
    if not count > 0 or math.isnan(start) or math.isnan(stop):
        return []
    if start == stop:
        return [float(start)]

    reverse = stop < start
    lo, hi = (stop, start) if reverse else (start, stop)
    i1, i2, inc = _tick_increment(lo, hi, count)
    if not i2 >= i1:
        return []

    if inc < 0:
        ticks = [(i1 + i) / -inc for i in range(i2 - i1 + 1)]
    else:
        ticks = [float((i1 + i) * inc) for i in range(i2 - i1 + 1)]
    return ticks[::-1] if reverse else ticks


def epanechnikov(bandwidth: float) -> Callable[[np.ndarray], np.ndarray]:
    """K(u) = 0.75 (1 - (u/h)^2) / h  for |u/h| <= 1, zero outside."""
    def kernel(u):
        scaled = np.asarray(u, dtype=float) / bandwidth
        return np.where(np.abs(scaled) <= 1, 0.75 * (1 - scaled * scaled) / bandwidth, 0.0)
    return kernel


def kernel_density(sample: Sequence[float], grid: Sequence[float],
                   kernel: Callable[[np.ndarray], np.ndarray]) -> list[tuple[float, float]]:
    """[(x, mean kernel(x - s) over the sample)] for each x in grid."""
    xs = np.asarray(grid, dtype=float)
    sample = np.asarray(sample, dtype=float)
    sample = sample[~np.isnan(sample)]
    if sample.size == 0:
        return [(float(x), 0.0) for x in xs]
    density = kernel(np.subtract.outer(xs, sample)).mean(axis=1)
    return list(zip(xs.tolist(), density.tolist()))
