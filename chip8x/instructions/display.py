"""CHIP-8 display operations."""

import jax.numpy as jnp
from chip8x.state import MachineState, set_fault
from chip8x.decode import DecodedInstruction
from chip8x.constants import (
    SCREEN_WIDTH, SCREEN_HEIGHT, SPRITE_WIDTH, MAX_SPRITE_HEIGHT, MEMORY_SIZE, FLAG_REGISTER, Fault,
)

# Pre-computed sprite offsets; at most 15 rows by 8 columns, so wrapped cells never repeat
sprite_rows = jnp.arange(MAX_SPRITE_HEIGHT)
sprite_cols = jnp.arange(SPRITE_WIDTH)


def execute_display(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """DXYN - XOR an 8xN sprite from memory[I] onto the screen at (VX, VY), wrapping at the edges.

    VF is set to 1 if any lit pixel was turned off, else 0.
    """
    origin_x = jnp.astype(state.V[instruction.x], jnp.int32) % SCREEN_WIDTH
    origin_y = jnp.astype(state.V[instruction.y], jnp.int32) % SCREEN_HEIGHT

    active_rows = sprite_rows < instruction.n
    addresses = jnp.astype(state.I, jnp.int32) + sprite_rows
    state = set_fault(state, jnp.any(active_rows & (addresses >= MEMORY_SIZE)), Fault.OUT_OF_BOUNDS)

    sprite_bytes = state.memory[jnp.minimum(addresses, MEMORY_SIZE - 1)]
    bits = (sprite_bytes[:, None] >> (7 - sprite_cols)[None, :]) & 1
    bits = (bits == 1) & active_rows[:, None]

    ys = (origin_y + sprite_rows) % SCREEN_HEIGHT
    xs = (origin_x + sprite_cols) % SCREEN_WIDTH
    sprite = jnp.zeros_like(state.display).at[ys[:, None], xs[None, :]].set(bits)

    collision = jnp.any(state.display & sprite)
    return state.replace(
        display=state.display ^ sprite,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    )
