"""CHIP-8 emulator state structures."""

from typing import Optional

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chipax.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, NUM_REGISTERS, NUM_KEYS,
)


@dataclass(frozen=True)
class StackState:
    """Return address stack for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.int32))


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    The display is stored row-major as ``(SCREEN_HEIGHT, SCREEN_WIDTH)`` and
    indexed ``display[y, x]``. ``keypad`` holds the set of logical keys the
    host currently reports as held.
    """
    rng: jax.Array
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.asarray(PROGRAM_START, dtype=jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=jnp.bool_))
    stack: StackState = field(default_factory=StackState)
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    waiting_for_key: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))
    key_register: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    modern_mode: bool = field(pytree_node=False, default=False)

    @property
    def pressed_key(self) -> Optional[int]:
        """Lowest currently held key code, or None."""
        if not bool(jnp.any(self.keypad)):
            return None
        return int(jnp.argmax(self.keypad))


def create_state(rng: jax.Array = jax.random.PRNGKey(0), modern_mode: bool = False) -> EmulatorState:
    """Create initial emulator state with font data loaded."""
    state = EmulatorState(rng, modern_mode=modern_mode)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))


def press_keys(state: EmulatorState, keys) -> EmulatorState:
    """Replace the held key set with ``keys`` (an iterable of codes 0x0-0xF)."""
    keypad = jnp.zeros(NUM_KEYS, dtype=jnp.bool_)
    for key in keys:
        keypad = keypad.at[key & 0xF].set(True)
    return state.replace(keypad=keypad)
