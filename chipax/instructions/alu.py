"""CHIP-8 ALU operations (8xxx).

Each operation maps ``(vx, vy)`` to ``(result, flag)``. ADD and the shifts write
the result to VX first and the flag to VF last, so VF holds the flag when X is
F. The subtractions write the flag first, so VF holds the difference instead.
"""

import jax.numpy as jnp
from chipax.state import EmulatorState
from chipax.decode import DecodedInstruction
from chipax.constants import FLAG_REGISTER


def _no_flag():
    return jnp.zeros((), dtype=jnp.uint8)


def alu_set(vx: int, vy: int) -> tuple[int, int]:
    """8XY0 - Set: VX = VY."""
    return vy, _no_flag()


def alu_or(vx: int, vy: int) -> tuple[int, int]:
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, _no_flag()


def alu_and(vx: int, vy: int) -> tuple[int, int]:
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, _no_flag()


def alu_xor(vx: int, vy: int) -> tuple[int, int]:
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, _no_flag()


def alu_add(vx: int, vy: int) -> tuple[int, int]:
    """8XY4 - Add: VX += VY, VF = carry."""
    result = jnp.astype(vx, jnp.int32) + jnp.astype(vy, jnp.int32)
    carry = jnp.astype(result > 0xFF, jnp.uint8)
    return jnp.astype(result & 0xFF, jnp.uint8), carry


def alu_sub_xy(vx: int, vy: int) -> tuple[int, int]:
    """8XY5 - Subtract: VX -= VY, VF = 1 when VX > VY."""
    not_borrow = jnp.astype(vx > vy, jnp.uint8)
    return vx - vy, not_borrow


def alu_sub_yx(vx: int, vy: int) -> tuple[int, int]:
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when VY > VX."""
    not_borrow = jnp.astype(vy > vx, jnp.uint8)
    return vy - vx, not_borrow


def alu_shift_right(source: int) -> tuple[int, int]:
    """8XY6 - Shift right by one, VF = shifted-out bit 0."""
    return source >> 1, source & 1


def alu_shift_left(source: int) -> tuple[int, int]:
    """8XYE - Shift left by one, VF = shifted-out bit 7."""
    return source << 1, (source >> 7) & 1


def make_alu_instruction(operation, sets_flag: bool, flag_first: bool = False):
    """Factory for 8XYN instructions."""
    def alu_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        vx = state.V[instruction.x]
        vy = state.V[instruction.y]
        result, flag = operation(vx, vy)

        new_V = state.V
        if sets_flag and flag_first:
            new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(flag, jnp.uint8))
        new_V = new_V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
        if sets_flag and not flag_first:
            new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(flag, jnp.uint8))
        return state.replace(V=new_V)
    return alu_instruction


def make_shift_instruction(operation):
    """Factory for shifts; the source is VY, or VX in modern mode."""
    def shift_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        source = state.V[instruction.x] if state.modern_mode else state.V[instruction.y]
        result, flag = operation(source)

        new_V = state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
        new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(flag, jnp.uint8))
        return state.replace(V=new_V)
    return shift_instruction


execute_alu_set = make_alu_instruction(alu_set, sets_flag=False)
execute_alu_or = make_alu_instruction(alu_or, sets_flag=False)
execute_alu_and = make_alu_instruction(alu_and, sets_flag=False)
execute_alu_xor = make_alu_instruction(alu_xor, sets_flag=False)
execute_alu_add = make_alu_instruction(alu_add, sets_flag=True)
execute_alu_sub_xy = make_alu_instruction(alu_sub_xy, sets_flag=True, flag_first=True)
execute_alu_sub_yx = make_alu_instruction(alu_sub_yx, sets_flag=True, flag_first=True)
execute_alu_shift_right = make_shift_instruction(alu_shift_right)
execute_alu_shift_left = make_shift_instruction(alu_shift_left)
