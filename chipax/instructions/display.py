"""CHIP-8 display operations."""

import jax.numpy as jnp
from chipax.state import EmulatorState
from chipax.decode import DecodedInstruction
from chipax.constants import SCREEN_WIDTH, SCREEN_HEIGHT, MEMORY_SIZE, FLAG_REGISTER

# Pre-computed coordinate grids for display operations, row-major like the display
yy, xx = jnp.meshgrid(jnp.arange(SCREEN_HEIGHT), jnp.arange(SCREEN_WIDTH), indexing='ij')


def sprite_mask(state: EmulatorState, origin_x, origin_y, height) -> jnp.ndarray:
    """Boolean screen mask of the sprite at I, wrapped around both screen edges."""
    col_offset = (xx - origin_x) % SCREEN_WIDTH
    row_offset = (yy - origin_y) % SCREEN_HEIGHT
    in_sprite = (col_offset < 8) & (row_offset < height)

    addresses = (jnp.astype(state.I, jnp.int32) + row_offset) % MEMORY_SIZE
    sprite_bytes = jnp.astype(state.memory[addresses], jnp.int32)
    bits = (sprite_bytes >> jnp.clip(7 - col_offset, 0, 7)) & 1
    return (bits == 1) & in_sprite


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - XOR sprite at (VX, VY) with height N; VF = 1 if a lit pixel was erased."""
    origin_x = jnp.astype(state.V[instruction.x], jnp.int32) % SCREEN_WIDTH
    origin_y = jnp.astype(state.V[instruction.y], jnp.int32) % SCREEN_HEIGHT

    sprite = sprite_mask(state, origin_x, origin_y, instruction.n)
    collision = jnp.any(state.display & sprite)

    return state.replace(
        display=state.display ^ sprite,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    )
