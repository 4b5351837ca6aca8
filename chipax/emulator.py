"""Main CHIP-8 emulator execution engine."""

from typing import Callable, Iterable, Optional

import jax
import jax.lax
import jax.numpy as jnp
from chipax.state import EmulatorState
from chipax.decode import Op, decode
from chipax.constants import PROGRAM_START, MEMORY_SIZE, MAX_ROM_SIZE, STACK_SIZE, DEFAULT_INSTRUCTIONS_PER_FRAME
from chipax.errors import FetchOutOfBoundsError, StackOverflowError, StackUnderflowError, RomTooLargeError
from chipax.logging import get_logger, progress_bar
from chipax.debug import current_instruction
from chipax.instructions.system import execute_clear_screen, execute_return, execute_unhandled
from chipax.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key_pressed, execute_skip_if_key_not_pressed,
)
from chipax.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor, execute_alu_add,
    execute_alu_sub_xy, execute_alu_shift_right, execute_alu_sub_yx, execute_alu_shift_left,
)
from chipax.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chipax.instructions.display import execute_display
from chipax.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers,
)

HANDLERS = {
    Op.SYS: execute_unhandled,
    Op.CLS: execute_clear_screen,
    Op.RET: execute_return,
    Op.JP: execute_jump,
    Op.CALL: execute_call,
    Op.SE_BYTE: execute_skip_if_equal_immediate,
    Op.SNE_BYTE: execute_skip_if_not_equal_immediate,
    Op.SE_REG: execute_skip_if_equal_register,
    Op.LD_BYTE: execute_set,
    Op.ADD_BYTE: execute_add,
    Op.LD_REG: execute_alu_set,
    Op.OR: execute_alu_or,
    Op.AND: execute_alu_and,
    Op.XOR: execute_alu_xor,
    Op.ADD_REG: execute_alu_add,
    Op.SUB: execute_alu_sub_xy,
    Op.SHR: execute_alu_shift_right,
    Op.SUBN: execute_alu_sub_yx,
    Op.SHL: execute_alu_shift_left,
    Op.SNE_REG: execute_skip_if_not_equal_register,
    Op.LD_I: execute_set_index,
    Op.JP_V0: execute_jump_with_offset,
    Op.RND: execute_random,
    Op.DRW: execute_display,
    Op.SKP: execute_skip_if_key_pressed,
    Op.SKNP: execute_skip_if_key_not_pressed,
    Op.LD_VX_DT: execute_get_delay_timer,
    Op.LD_KEY: execute_wait_for_key,
    Op.LD_DT_VX: execute_set_delay_timer,
    Op.LD_ST_VX: execute_set_sound_timer,
    Op.ADD_I: execute_add_to_index,
    Op.LD_FONT: execute_font_character,
    Op.LD_BCD: execute_bcd_conversion,
    Op.STORE: execute_store_registers,
    Op.LOAD: execute_load_registers,
    Op.UNKNOWN: execute_unhandled,
}

assert sorted(HANDLERS) == list(Op), "every Op needs a handler"
_BRANCHES = [HANDLERS[op] for op in Op]


@jax.jit
def execute(state: EmulatorState, instruction: int, address=None) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    ``address`` is where the instruction was fetched from and defaults to ``pc``.
    """
    if address is None:
        address = state.pc
    decoded_instruction = decode(instruction, address)
    return jax.lax.switch(decoded_instruction.op, _BRANCHES, state, decoded_instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory and advance the program counter."""
    instruction = _pack_u16(state.memory[state.pc], state.memory[state.pc + 1])
    return state.replace(pc=state.pc + 2), instruction


def _capture_key(state: EmulatorState) -> EmulatorState:
    """Key-wait cycle: store the lowest held key and resume, or keep waiting."""
    key = jnp.astype(jnp.argmax(state.keypad), jnp.uint8)
    return jax.lax.cond(
        jnp.any(state.keypad),
        lambda s: s.replace(
            V=s.V.at[s.key_register].set(key),
            waiting_for_key=jnp.zeros((), dtype=jnp.bool_),
        ),
        lambda s: s,
        state
    )


def _fetch_and_execute(state: EmulatorState) -> EmulatorState:
    address = state.pc
    state, instruction = fetch(state)
    return execute(state, instruction, address)


@jax.jit
def step(state: EmulatorState) -> EmulatorState:
    """Run one unchecked cycle: a key poll while waiting, otherwise one instruction."""
    return jax.lax.cond(state.waiting_for_key, _capture_key, _fetch_and_execute, state)


def cycle(state: EmulatorState) -> EmulatorState:
    """Run one cycle, raising on conditions that must stop the run loop.

    Raises:
        FetchOutOfBoundsError: the opcode at ``pc`` does not fit in memory.
        StackOverflowError: a call was made with a full stack.
        StackUnderflowError: a return was made with an empty stack.
    """
    pc = int(state.pc)
    if not bool(state.waiting_for_key) and pc + 1 >= MEMORY_SIZE:
        raise FetchOutOfBoundsError(pc)

    new_state = step(state)

    pointer = int(new_state.stack.pointer)
    if pointer > STACK_SIZE:
        raise StackOverflowError(pc)
    if pointer < 0:
        raise StackUnderflowError(pc)
    return new_state


def traced_cycle(state: EmulatorState) -> EmulatorState:
    """Like ``cycle``, logging the executed instruction when DEBUG is enabled."""
    logger = get_logger()
    if logger.is_enabled("DEBUG") and not bool(state.waiting_for_key):
        instruction = current_instruction(state)
        if instruction is not None:
            logger.log_instruction(*instruction)
    return cycle(state)


@jax.jit
def tick_timers(state: EmulatorState) -> EmulatorState:
    """Decrement delay and sound timers by one, stopping at zero."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    )


def run(
    state: EmulatorState,
    num_frames: int,
    instructions_per_frame: int = DEFAULT_INSTRUCTIONS_PER_FRAME,
    on_frame: Optional[Callable[[int, EmulatorState], Optional[EmulatorState]]] = None,
    progress: bool = False,
) -> EmulatorState:
    """Run ``num_frames`` frames headlessly.

    Each frame ticks the timers once and then runs ``instructions_per_frame``
    checked cycles. ``on_frame(frame_index, state)`` is called after every
    frame and may return a replacement state (e.g. with a new keypad).
    """
    with progress_bar(num_frames, enabled=progress) as bar:
        for frame in range(num_frames):
            state = tick_timers(state)
            for _ in range(instructions_per_frame):
                state = traced_cycle(state)
            if on_frame is not None:
                replacement = on_frame(frame, state)
                if replacement is not None:
                    state = replacement
            bar.update(1)
    return state


def load_rom_bytes(state: EmulatorState, rom_data: bytes) -> EmulatorState:
    """Write a program image into CHIP-8 memory starting at 0x200."""
    if len(rom_data) > MAX_ROM_SIZE:
        raise RomTooLargeError(len(rom_data), MAX_ROM_SIZE)
    if not rom_data:
        return state
    rom_array = jnp.array(list(rom_data), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(rom_data)].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_rom_bytes(state, rom_data)


def load_program(state: EmulatorState, instructions: Iterable[int]) -> EmulatorState:
    """Load a sequence of 16-bit opcodes at 0x200 (big-endian)."""
    rom_data = b"".join(int(op).to_bytes(2, "big") for op in instructions)
    return load_rom_bytes(state, rom_data)
