"""CHIP-8 control flow instructions.

``fetch`` has already moved ``pc`` past the current instruction, so jumps set
the target directly and skips add one more instruction width.
"""

import jax
import jax.lax
import jax.numpy as jnp
from chipax.state import EmulatorState
from chipax.decode import DecodedInstruction
from chipax.stack import push
from chipax.constants import NUM_KEYS


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.astype(instruction.nnn, jnp.uint16))


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """2NNN - Call subroutine at NNN."""
    state = state.replace(stack=push(state.stack, state.pc))
    return execute_jump(state, instruction)


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        condition = condition_fn(state, instruction)
        return jax.lax.cond(
            condition,
            lambda s: s.replace(pc=s.pc + 2),
            lambda s: s,
            state
        )
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)


def key_held(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    """Whether the key named by VX is held; values above 0xF name no key."""
    key = state.V[instruction.x]
    return (key < NUM_KEYS) & state.keypad[jnp.minimum(key, NUM_KEYS - 1)]


execute_skip_if_key_pressed = make_skip_instruction(key_held)

execute_skip_if_key_not_pressed = make_skip_instruction(
    lambda state, inst: ~key_held(state, inst)
)


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BNNN - Jump to NNN + V0, or NNN + VX (BXNN) in modern mode."""
    offset_register = instruction.x if state.modern_mode else 0
    jump_address = jnp.astype(instruction.nnn, jnp.uint16) + jnp.astype(state.V[offset_register], jnp.uint16)
    return state.replace(pc=jump_address)
