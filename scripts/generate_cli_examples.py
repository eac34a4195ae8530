from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

EXAMPLES_ROOT = Path("examples/cli-options")
BASE_ARGS = ["--width", "160", "--height", "120", "--max-iterations", "500"]


@dataclass
class Expected:
    path: Path


@dataclass
class Example:
    name: str
    args: list[str]
    expected: list[Expected]
    clean: list[Path] | None = None

    def full_args(self) -> list[str]:
        root = EXAMPLES_ROOT / self.name
        return ["python", "render.py", *BASE_ARGS, "--output-dir", str(root), "--log-file", str(root / "logfile"), *self.args]


def _outputs(name: str, *files: str) -> list[Expected]:
    return [Expected(EXAMPLES_ROOT / name / file) for file in (*files, "logfile")]


EXAMPLES: list[Example] = [
    Example(
        name="default",
        args=[],
        expected=_outputs("default", "image.png", "concurrent_image.png"),
        clean=[EXAMPLES_ROOT / "default"],
    ),
    Example(
        name="sequential",
        args=["--mode", "sequential"],
        expected=_outputs("sequential", "image.png"),
        clean=[EXAMPLES_ROOT / "sequential"],
    ),
    Example(
        name="single-worker",
        args=["--mode", "concurrent", "--workers", "1"],
        expected=_outputs("single-worker", "concurrent_image.png"),
        clean=[EXAMPLES_ROOT / "single-worker"],
    ),
    Example(
        name="auto-workers",
        args=["--mode", "concurrent", "--workers", "auto"],
        expected=_outputs("auto-workers", "concurrent_image.png"),
        clean=[EXAMPLES_ROOT / "auto-workers"],
    ),
    Example(
        name="tensor",
        args=["--mode", "tensor"],
        expected=_outputs("tensor", "tensor_image.png"),
        clean=[EXAMPLES_ROOT / "tensor"],
    ),
    Example(
        name="seahorse-valley",
        args=["--mode", "concurrent", "--top-left=-0.8-0.2j", "--bottom-right=-0.7-0.1j"],
        expected=_outputs("seahorse-valley", "concurrent_image.png"),
        clean=[EXAMPLES_ROOT / "seahorse-valley"],
    ),
    Example(
        name="format",
        args=["--mode", "sequential", "--format", "webp"],
        expected=_outputs("format", "image.webp"),
        clean=[EXAMPLES_ROOT / "format"],
    ),
    Example(
        name="verbose",
        args=["--mode", "sequential", "--verbose"],
        expected=_outputs("verbose", "image.png"),
        clean=[EXAMPLES_ROOT / "verbose"],
    ),
]


def _ensure_clean(paths: Iterable[Path]) -> None:
    for path in paths:
        if path.exists():
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()


def _prepare(example: Example) -> None:
    clean = example.clean or []
    _ensure_clean(clean)
    for expected in example.expected:
        expected.path.parent.mkdir(parents=True, exist_ok=True)


def _verify(example: Example) -> None:
    for expected in example.expected:
        if not expected.path.is_file():
            raise RuntimeError(f"Expected file {expected.path} was not created")


def main() -> None:
    EXAMPLES_ROOT.mkdir(parents=True, exist_ok=True)
    for example in EXAMPLES:
        print(f"\n[cli-example] {example.name}")
        _prepare(example)
        completed = subprocess.run(example.full_args(), check=True)
        if completed.returncode != 0:
            raise RuntimeError(f"Example {example.name} failed with {completed.returncode}")
        _verify(example)
    print("\nAll CLI examples generated successfully.")


if __name__ == "__main__":
    main()
