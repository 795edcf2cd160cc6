#!/usr/bin/env python3
"""Render the demo scene (or a scene file) to a PNG.

This script runs the full pipeline: it builds the scene, configures the
camera and shading settings, renders every pixel in parallel and writes the
result with Pillow.

Usage:
    python -m examples.render_demo [options]

Options:
    --width WIDTH         Image width in pixels (default: 800)
    --height HEIGHT       Image height in pixels (default: 600)
    --output OUTPUT       Output file path (default: glimmer.png)
    --scene FILE          Load the scene from a JSON file instead of the demo
    --no-aa               Render one sample per pixel
    --depth               Write a grayscale distance image instead of color
    --max-depth N         Maximum number of reflection bounces (default: 3)
    --bias BIAS           Secondary ray origin offset (default: 0.001)
    --threads N           CPU worker threads (default: all cores)
    --cpu                 Force the CPU backend
    --verbose             Enable debug logging

Example:
    python -m examples.render_demo --width 320 --height 240 --no-aa
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import taichi as ti

logger = logging.getLogger("glimmer.examples.render_demo")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the glimmer demo scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=800,
        help="Image width in pixels (default: 800)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=600,
        help="Image height in pixels (default: 600)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="glimmer.png",
        help="Output file path (default: glimmer.png)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene description to render instead of the demo scene",
    )
    parser.add_argument(
        "--no-aa",
        action="store_true",
        help="Disable antialiasing (one sample per pixel)",
    )
    parser.add_argument(
        "--depth",
        action="store_true",
        help="Render a grayscale distance image",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=3,
        help="Maximum number of reflection bounces (default: 3)",
    )
    parser.add_argument(
        "--bias",
        type=float,
        default=1e-3,
        help="Offset applied to shadow and reflection rays (default: 0.001)",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=None,
        help="Number of CPU worker threads (default: all cores)",
    )
    parser.add_argument(
        "--cpu",
        action="store_true",
        help="Use the CPU backend even when a GPU is available",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def init_taichi(force_cpu: bool = False, threads: int | None = None) -> None:
    """Initialize Taichi, preferring the GPU unless told otherwise.

    The thread count is passed to both attempts: ti.init(arch=ti.gpu) falls
    back to the CPU by itself when no GPU is present, and it is ignored by
    GPU backends.
    """
    cpu_kwargs = {}
    if threads is not None:
        if threads <= 0:
            raise ValueError(f"--threads must be positive, got {threads}")
        cpu_kwargs["cpu_max_num_threads"] = threads

    if not force_cpu:
        try:
            ti.init(arch=ti.gpu, **cpu_kwargs)
            logger.info("Using %s backend", ti.lang.impl.current_cfg().arch)
            return
        except Exception:
            logger.info("No usable GPU backend, falling back to CPU")
    ti.init(arch=ti.cpu, **cpu_kwargs)
    logger.info("Using CPU backend")


def render_demo(
    width: int = 800,
    height: int = 600,
    output_path: str = "glimmer.png",
    scene_path: str | None = None,
    antialias: bool = True,
    depth: bool = False,
    max_depth: int = 3,
    bias: float = 1e-3,
) -> Path:
    """Render a scene and save it to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        output_path: Output file path (PNG).
        scene_path: Optional JSON scene file. The demo scene is used if None.
        antialias: Use the four-sample grid kernel.
        depth: Write a distance image instead of a shaded one.
        max_depth: Maximum number of reflection bounces.
        bias: Offset for secondary ray origins.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from glimmer.camera.pinhole import PinholeCamera
    from glimmer.core.integrator import RenderSettings
    from glimmer.core.renderer import AntialiasConfig, render, render_depth
    from glimmer.preview.export import save_png
    from glimmer.scene.demo import create_demo_scene
    from glimmer.scene.manager import SceneManager

    if scene_path is not None:
        scene = SceneManager.from_json_file(scene_path)
        camera = PinholeCamera()
    else:
        scene, camera = create_demo_scene()

    if depth:
        pixels = render_depth(scene, width, height, camera=camera)
    else:
        pixels = render(
            scene,
            width,
            height,
            antialiasing=AntialiasConfig.grid() if antialias else AntialiasConfig.none(),
            settings=RenderSettings(max_depth=max_depth, bias=bias),
            camera=camera,
        )

    return save_png(pixels, output_path)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        init_taichi(force_cpu=args.cpu, threads=args.threads)
        output = render_demo(
            width=args.width,
            height=args.height,
            output_path=args.output,
            scene_path=args.scene,
            antialias=not args.no_aa,
            depth=args.depth,
            max_depth=args.max_depth,
            bias=args.bias,
        )
        logger.info("Saved to: %s", output.absolute())
        return 0
    except Exception as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
