#!/usr/bin/env python3
"""
Performance profiling script for the day/night mask renderer.
Profiles MaskRenderer.render over a range of viewport sizes and strides.

Usage:
    python scripts/profile_render.py [--width W] [--height H] [--strides 1,2,4] [--repeat N]

Example:
    python scripts/profile_render.py --width 400 --height 200 --strides 1,2,4,8
"""

import argparse
import cProfile
import pstats
import time
from datetime import datetime, timezone
from io import StringIO

from daynight.mask_renderer import MaskRenderer
from daynight.projection import MercatorViewport
from daynight.solar import compute_subsolar_point


def profile_function(func, *args, label="function", **kwargs):
    """Profile a function and print stats."""
    profiler = cProfile.Profile()

    # Warmup
    func(*args, **kwargs)

    start = time.perf_counter()
    profiler.enable()
    result = func(*args, **kwargs)
    profiler.disable()
    elapsed = time.perf_counter() - start

    print(f"\n{'='*60}")
    print(f"{label}: {elapsed*1000:.2f} ms")
    print(f"{'='*60}")

    stream = StringIO()
    stats = pstats.Stats(profiler, stream=stream)
    stats.sort_stats('cumulative')
    stats.print_stats(10)
    print(stream.getvalue())

    return result


def time_renders(renderer, viewport, subsolar, repeat):
    """Mean wall time of `repeat` renders, in ms."""
    start = time.perf_counter()
    for _ in range(repeat):
        renderer.render(viewport, subsolar)
    return (time.perf_counter() - start) / repeat * 1000


def main():
    parser = argparse.ArgumentParser(description='Profile day/night mask rendering')
    parser.add_argument('--width', type=int, default=400, help='Viewport width in pixels')
    parser.add_argument('--height', type=int, default=200, help='Viewport height in pixels')
    parser.add_argument('--strides', default='1,2,4,8', help='Comma-separated strides')
    parser.add_argument('--zoom', type=float, default=1.0)
    parser.add_argument('--repeat', type=int, default=20, help='Renders per timing')
    parser.add_argument('--profile', action='store_true', help='Print cProfile stats per stride')
    args = parser.parse_args()

    strides = [int(s) for s in args.strides.split(',') if s.strip()]
    subsolar = compute_subsolar_point(datetime.now(timezone.utc))
    viewport = MercatorViewport(args.width, args.height, 20.0, 0.0, args.zoom)

    print(f"Viewport: {viewport}")
    print(f"Subsolar point: {subsolar.latitude:.2f}, {subsolar.longitude:.2f}")
    print(f"\n{'Stride':>6} {'Samples':>9} {'Mean ms':>9}")

    for stride in strides:
        renderer = MaskRenderer(stride=stride)
        samples = -(-args.width // stride) * -(-args.height // stride)
        mean_ms = time_renders(renderer, viewport, subsolar, args.repeat)
        print(f"{stride:>6} {samples:>9} {mean_ms:>9.2f}")

    if args.profile:
        for stride in strides:
            renderer = MaskRenderer(stride=stride)
            profile_function(renderer.render, viewport, subsolar, label=f"render stride={stride}")


if __name__ == '__main__':
    main()
