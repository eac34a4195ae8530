import os
import sys
import warnings
from dataclasses import dataclass
from pathlib import Path

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

import logging
import time
from argparse import ArgumentParser

from escapetime import (
    DEFAULT_WORKERS,
    MAX_ITERATIONS,
    ConfigurationError,
    ImageWriteError,
    PixelGrid,
    Viewport,
    new_image_buffer,
    render_concurrent,
    render_sequential,
    write_single_image,
)

logger = logging.getLogger("escapetime.cli")

MODES = ("sequential", "concurrent", "tensor")
DEFAULT_MODES = ("sequential", "concurrent")
OUTPUT_NAMES = {
    "sequential": "image",
    "concurrent": "concurrent_image",
    "tensor": "tensor_image",
}


@dataclass(frozen=True)
class RenderConfig:
    width: int
    height: int
    top_left: complex
    bottom_right: complex
    workers: int
    max_iterations: int
    modes: tuple[str, ...]
    output_dir: Path
    image_format: str
    log_file: Path
    verbose: bool

    def output_path(self, mode: str) -> Path:
        return self.output_dir / f"{OUTPUT_NAMES[mode]}.{self.image_format}"


def _complex_arg(value: str) -> complex:
    # complex() rejects embedded spaces and the "i" suffix people tend to type.
    return complex(value.replace(" ", "").replace("i", "j"))


def build_parser():
    parser = ArgumentParser(description="Render an escape-time fractal sequentially and with a worker pool.")

    parser.add_argument('--width', type=int,
                        dest='width', help='number of pixel columns in the rendered image',
                        metavar='WIDTH', default=800)

    parser.add_argument('--height', type=int,
                        dest='height', help='number of pixel rows in the rendered image',
                        metavar='HEIGHT', default=600)

    parser.add_argument('--top-left', type=_complex_arg,
                        dest='top_left', help='complex coordinate of the top-left corner, e.g. --top-left=-2.2-1.2j',
                        metavar='COMPLEX', default=complex(-2.2, -1.2))

    parser.add_argument('--bottom-right', type=_complex_arg,
                        dest='bottom_right', help='complex coordinate of the bottom-right corner, e.g. --bottom-right=1+1.2j',
                        metavar='COMPLEX', default=complex(1, 1.2))

    parser.add_argument('--workers', type=str,
                        dest='workers', help=f'number of render worker threads, or "auto" for one per core (default {DEFAULT_WORKERS})',
                        metavar='WORKERS', default=str(DEFAULT_WORKERS))

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations', help='maximum number of iterations before a point counts as inside the set',
                        metavar='MAX_ITERATIONS', default=MAX_ITERATIONS)

    parser.add_argument('--mode', dest='modes', action='append', metavar='MODE',
                        help='Render paths to run. May be repeated. Choices: sequential, concurrent, tensor. '
                             'Default: sequential and concurrent.')

    parser.add_argument('--output-dir', type=str,
                        dest='output_dir', help='directory in which the rendered images are written',
                        metavar='DIR', default='.')

    parser.add_argument('--format', type=str,
                        dest='format', help='file format for the rendered images. Can be any extension supported by Pillow. Default: "png".',
                        metavar='FORMAT', default='png')

    parser.add_argument('--log-file', type=str,
                        dest='log_file', help='file receiving timing and core-count messages',
                        metavar='LOG_FILE', default='logfile')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Also print log messages to the console, including TensorFlow diagnostics.')

    return parser


def resolve_workers(value: str) -> int:
    if value.strip().lower() == "auto":
        return os.cpu_count() or 1
    workers = int(value)
    if workers < 1:
        raise ConfigurationError(f"worker count must be at least 1, got {workers}")
    return workers


def resolve_config(opt, parser: ArgumentParser) -> RenderConfig:
    try:
        PixelGrid(opt.width, opt.height).validate()
        Viewport(opt.top_left, opt.bottom_right).validate()
        workers = resolve_workers(opt.workers)
    except ValueError as exc:
        parser.error(str(exc))

    if opt.max_iterations < 1:
        parser.error("--max-iterations must be at least 1.")

    modes: list[str] = []
    for mode in opt.modes or DEFAULT_MODES:
        mode = mode.lower()
        if mode not in MODES:
            parser.error(f"Unknown render mode '{mode}'. Valid choices: {', '.join(MODES)}.")
        if mode not in modes:
            modes.append(mode)

    image_format = (opt.format or "png").lower().lstrip(".") or "png"

    return RenderConfig(
        width=opt.width,
        height=opt.height,
        top_left=opt.top_left,
        bottom_right=opt.bottom_right,
        workers=workers,
        max_iterations=opt.max_iterations,
        modes=tuple(modes),
        output_dir=Path(opt.output_dir).expanduser().resolve(),
        image_format=image_format,
        log_file=Path(opt.log_file).expanduser(),
        verbose=bool(opt.verbose),
    )


def configure_logging(config: RenderConfig) -> list[logging.Handler]:
    file_handler = logging.FileHandler(config.log_file, mode='w', encoding='utf8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s.%(msecs)03d - %(name)s - %(threadName)s - %(levelname)s - %(message)s', '%H:%M:%S'))
    handlers: list[logging.Handler] = [file_handler]

    if config.verbose:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(logging.Formatter('%(levelname)s - %(message)s'))
        handlers.append(console_handler)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in handlers:
        root.addHandler(handler)
    return handlers


def _renderer_for(mode: str, config: RenderConfig):
    if mode == "sequential":
        return lambda buffer: render_sequential(
            buffer, config.top_left, config.bottom_right, max_iterations=config.max_iterations)
    if mode == "concurrent":
        return lambda buffer: render_concurrent(
            buffer, config.top_left, config.bottom_right,
            workers=config.workers, max_iterations=config.max_iterations)

    import tensorflow as tf
    from escapetime.tensor import render_tensor

    if not config.verbose:
        tf.get_logger().setLevel("ERROR")
    logger.info("TensorFlow version: %s", tf.__version__)
    return lambda buffer: render_tensor(
        buffer, config.top_left, config.bottom_right, max_iterations=config.max_iterations)


def run(config: RenderConfig) -> int:
    logger.info("Number of available cores: %d", os.cpu_count() or 1)
    logger.info("Number of render workers: %d", config.workers)

    for mode in config.modes:
        buffer = new_image_buffer(config.width, config.height)
        render = _renderer_for(mode, config)

        logger.info("rendering %s", mode)
        started = time.perf_counter()
        render(buffer)
        logger.info("%s render took %.3fs", mode, time.perf_counter() - started)

        try:
            path = write_single_image(buffer, config.output_path(mode), config.image_format)
        except ImageWriteError:
            logger.exception("Error writing image on disk")
            return 1
        logger.info("wrote %s", path)
    return 0


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)
    config = resolve_config(opt, parser)

    handlers = configure_logging(config)
    try:
        return run(config)
    finally:
        root = logging.getLogger()
        for handler in handlers:
            root.removeHandler(handler)
            handler.close()


if __name__ == '__main__':
    sys.exit(main())
