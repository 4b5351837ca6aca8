"""Command-line entry point: ``chipax -f ROM [options]``."""

import argparse
import sys
from typing import List, Optional

import jax
import numpy as np

from chipax.config import EmulatorConfig
from chipax.constants import DEFAULT_INSTRUCTIONS_PER_FRAME, TIMER_FREQUENCY
from chipax.debug import status_lines
from chipax.emulator import load_rom, run
from chipax.errors import Chip8Error
from chipax.logging import get_logger, set_log_level
from chipax.rendering import COLOR_SCHEMES, create_video, save_screenshot
from chipax.state import create_state


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chipax",
        description="CHIP-8 interpreter built on JAX",
    )
    parser.add_argument(
        "-f", "--file",
        required=True,
        help="The ROM file you want to run",
    )
    parser.add_argument(
        "--scale",
        type=int,
        default=10,
        help="Window pixels per CHIP-8 cell (default: 10)",
    )
    parser.add_argument(
        "--ipf",
        type=int,
        default=DEFAULT_INSTRUCTIONS_PER_FRAME,
        help=f"Instructions per frame (default: {DEFAULT_INSTRUCTIONS_PER_FRAME})",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=TIMER_FREQUENCY,
        help=f"Frame and timer rate in Hz (default: {TIMER_FREQUENCY})",
    )
    parser.add_argument(
        "--modern",
        action="store_true",
        help="Use CHIP-48 shift, load/store and jump-with-offset behaviour",
    )
    parser.add_argument(
        "--color-scheme",
        default="classic",
        choices=sorted(COLOR_SCHEMES),
        help="Display colours (default: classic)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show the debug overlay on start",
    )
    parser.add_argument(
        "--step",
        action="store_true",
        help="Start in step mode (Space executes one instruction)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for the RND instruction (default: 0)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Console log level; DEBUG traces every instruction (default: INFO)",
    )
    parser.add_argument(
        "--headless",
        type=int,
        metavar="FRAMES",
        default=None,
        help="Run FRAMES frames without opening a window",
    )
    parser.add_argument(
        "--record",
        metavar="PATH",
        default=None,
        help="With --headless, save the frames as an MP4 video",
    )
    parser.add_argument(
        "--screenshot",
        metavar="PATH",
        default=None,
        help="With --headless, save the final frame as an image",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> EmulatorConfig:
    return EmulatorConfig(
        rom_path=args.file,
        scale=args.scale,
        instructions_per_frame=args.ipf,
        fps=args.fps,
        modern_mode=args.modern,
        color_scheme=args.color_scheme,
        show_debug=args.debug,
        step_mode=args.step,
        seed=args.seed,
        log_level=args.log_level,
        headless_frames=args.headless,
        record_path=args.record,
        screenshot_path=args.screenshot,
    ).validate()


def run_headless(config: EmulatorConfig) -> int:
    """Run the configured number of frames without a window."""
    logger = get_logger()
    state = create_state(jax.random.PRNGKey(config.seed), modern_mode=config.modern_mode)
    state = load_rom(state, config.rom_path)

    frames = []

    def collect(frame, frame_state):
        if config.record_path:
            frames.append(np.asarray(frame_state.display))

    status = 0
    try:
        state = run(
            state,
            config.headless_frames,
            instructions_per_frame=config.instructions_per_frame,
            on_frame=collect,
            progress=True,
        )
    except Chip8Error as e:
        logger.critical(str(e))
        status = 1

    for line in status_lines(state):
        logger.info(line)
    logger.log_registers(
        np.asarray(state.V).tolist(), int(state.I), int(state.pc), int(state.stack.pointer),
        int(state.delay_timer), int(state.sound_timer),
    )

    if config.record_path and frames:
        create_video(frames, config.record_path, fps=config.fps, scale=config.scale,
                     color_scheme=config.color_scheme)
    if config.screenshot_path:
        save_screenshot(state.display, config.screenshot_path, scale=config.scale,
                        color_scheme=config.color_scheme)

    logger.log_run_end({
        "frames": config.headless_frames,
        "status": status,
    })
    return status


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    set_log_level(config.log_level)
    logger = get_logger()
    logger.log_run_start(config.as_dict())

    try:
        if config.headless_frames is not None:
            return run_headless(config)
        from chipax.frontend import run_emulator
        return run_emulator(config)
    except OSError as e:
        logger.error(f"Cannot read ROM: {e}")
        return 1
    except Chip8Error as e:
        logger.critical(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
