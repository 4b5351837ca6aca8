"""CHIP-8 stack operations."""

import jax.numpy as jnp
from chipax.state import StackState


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push address onto stack.

    A push onto a full stack is dropped by the scatter and leaves the pointer
    at ``STACK_SIZE + 1``, which the checked run loop reports as an overflow.
    """
    new_data = stack.data.at[stack.pointer].set(jnp.astype(address, jnp.uint16), mode="drop")
    return stack.replace(data=new_data, pointer=stack.pointer + 1)


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray]:
    """Pop address from stack."""
    new_pointer = stack.pointer - 1
    slot = jnp.clip(new_pointer, 0, stack.data.shape[0] - 1)
    popped_address = stack.data[slot]
    new_data = stack.data.at[slot].set(jnp.where(new_pointer >= 0, 0, stack.data[slot]))
    return stack.replace(data=new_data, pointer=new_pointer), popped_address
