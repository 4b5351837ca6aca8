"""CHIP-8 emulator package."""

from chipax.state import EmulatorState, StackState, create_state, press_keys
from chipax.emulator import execute, fetch, step, cycle, tick_timers, run, load_rom, load_rom_bytes, load_program
from chipax.decode import Op, DecodedInstruction, decode, classify, disassemble
from chipax.errors import (
    Chip8Error, FetchOutOfBoundsError, StackOverflowError, StackUnderflowError, RomTooLargeError,
)
from chipax.constants import *
from chipax.rendering import display_to_rgb, create_color_scheme

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "press_keys",
    "fetch",
    "execute",
    "step",
    "cycle",
    "tick_timers",
    "run",
    "load_rom",
    "load_rom_bytes",
    "load_program",
    "Op",
    "DecodedInstruction",
    "decode",
    "classify",
    "disassemble",
    "Chip8Error",
    "FetchOutOfBoundsError",
    "StackOverflowError",
    "StackUnderflowError",
    "RomTooLargeError",
    "MEMORY_SIZE",
    "PROGRAM_START",
    "MAX_ROM_SIZE",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "STACK_SIZE",
    "display_to_rgb",
    "create_color_scheme",
]
