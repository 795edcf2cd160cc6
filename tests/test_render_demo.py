"""Tests for the render_demo command-line example.

Taichi is already initialized by conftest.py, so these tests call
render_demo() directly instead of main(), which would re-initialize it.
"""

import json

import pytest
from PIL import Image as PILImage


class TestArgumentParsing:
    """Test command-line parsing."""

    def test_defaults(self):
        """Test the default options."""
        from examples.render_demo import parse_args

        args = parse_args([])
        assert (args.width, args.height) == (800, 600)
        assert args.output == "glimmer.png"
        assert args.scene is None
        assert not args.no_aa
        assert not args.depth
        assert args.max_depth == 3
        assert args.bias == pytest.approx(1e-3)
        assert args.threads is None

    def test_flags(self):
        """Test every option is parsed."""
        from examples.render_demo import parse_args

        args = parse_args(
            [
                "--width", "320",
                "--height", "240",
                "--output", "out.png",
                "--scene", "scene.json",
                "--no-aa",
                "--depth",
                "--max-depth", "1",
                "--bias", "0.01",
                "--threads", "2",
                "--cpu",
                "--verbose",
            ]
        )
        assert (args.width, args.height) == (320, 240)
        assert args.scene == "scene.json"
        assert args.no_aa and args.depth and args.cpu and args.verbose
        assert args.max_depth == 1
        assert args.threads == 2

    def test_invalid_thread_count(self):
        """Test a non-positive thread count is rejected before Taichi starts."""
        from examples.render_demo import init_taichi

        with pytest.raises(ValueError, match="threads"):
            init_taichi(force_cpu=True, threads=0)


class TestRenderDemo:
    """Test the render pipeline used by the CLI."""

    def test_renders_demo_scene(self, tmp_path):
        """Test the demo scene renders to a PNG of the requested size."""
        from examples.render_demo import render_demo

        output = render_demo(width=40, height=30, output_path=str(tmp_path / "demo.png"))

        with PILImage.open(output) as img:
            assert img.size == (40, 30)
            assert img.mode == "RGB"

    def test_depth_mode(self, tmp_path):
        """Test --depth writes a grayscale image."""
        from examples.render_demo import render_demo

        output = render_demo(width=20, height=10, output_path=str(tmp_path / "d.png"), depth=True)

        with PILImage.open(output) as img:
            assert img.mode == "L"

    def test_scene_file(self, tmp_path):
        """Test rendering a JSON scene description."""
        from examples.render_demo import render_demo

        scene_path = tmp_path / "scene.json"
        scene_path.write_text(
            json.dumps(
                {
                    "materials": [{"texture": "solid", "color": [0, 1, 0], "diffuse": 0.8}],
                    "spheres": [{"center": [0, 0, 3], "radius": 1.0, "material_id": 0}],
                    "lights": [{"position": [-2, -2, -1]}],
                }
            ),
            encoding="utf-8",
        )

        output = render_demo(
            width=16,
            height=16,
            output_path=str(tmp_path / "scene.png"),
            scene_path=str(scene_path),
            antialias=False,
        )

        with PILImage.open(output) as img:
            r, g, b = img.getpixel((8, 8))
        assert g > 0
        assert r == 0 and b == 0


class TestInitTaichi:
    """Test backend initialization options."""

    def test_threads_reach_gpu_attempt(self, monkeypatch):
        """Test the thread count is passed when the GPU backend is tried."""
        import examples.render_demo as render_demo

        calls = []
        monkeypatch.setattr(render_demo.ti, "init", lambda **kwargs: calls.append(kwargs))

        render_demo.init_taichi(force_cpu=False, threads=3)

        assert len(calls) == 1
        assert calls[0]["arch"] == render_demo.ti.gpu
        assert calls[0]["cpu_max_num_threads"] == 3

    def test_gpu_failure_falls_back_with_threads(self, monkeypatch):
        """Test a failing GPU init retries on the CPU with the same thread count."""
        import examples.render_demo as render_demo

        calls = []

        def fake_init(**kwargs):
            calls.append(kwargs)
            if kwargs["arch"] == render_demo.ti.gpu:
                raise RuntimeError("no GPU")

        monkeypatch.setattr(render_demo.ti, "init", fake_init)

        render_demo.init_taichi(force_cpu=False, threads=2)

        assert [c["arch"] for c in calls] == [render_demo.ti.gpu, render_demo.ti.cpu]
        assert calls[1]["cpu_max_num_threads"] == 2

    def test_cpu_thread_count_applied(self):
        """Test --threads sets Taichi's CPU thread count in a fresh interpreter."""
        import os
        import subprocess
        import sys
        from pathlib import Path

        root = Path(__file__).resolve().parent.parent
        code = (
            "import taichi as ti\n"
            "from examples.render_demo import init_taichi\n"
            "init_taichi(force_cpu=True, threads=2)\n"
            "print(ti.lang.impl.current_cfg().cpu_max_num_threads)\n"
        )
        env = dict(os.environ)
        env["PYTHONPATH"] = os.pathsep.join([str(root / "src"), str(root), env.get("PYTHONPATH", "")])

        result = subprocess.run(
            [sys.executable, "-c", code],
            cwd=root,
            env=env,
            capture_output=True,
            text=True,
            timeout=120,
        )

        assert result.returncode == 0, result.stderr
        assert result.stdout.strip().splitlines()[-1] == "2"
