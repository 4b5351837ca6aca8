"""CHIP-8 system instructions (0x0xxx) and the unhandled-opcode fallback."""

import jax
import jax.numpy as jnp
from chipax.state import EmulatorState
from chipax.decode import DecodedInstruction
from chipax.stack import pop
from chipax.logging import report_unhandled_opcode


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    stack, address = pop(state.stack)
    return state.replace(stack=stack, pc=address)


def execute_unhandled(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """0NNN and unmatched opcodes - no effect, reported as a diagnostic."""
    jax.debug.callback(report_unhandled_opcode, instruction.raw, instruction.address)
    return state
