"""CHIP-8 machine state structures."""

import jax
import jax.numpy as jnp
from dataclasses import field

from flax.struct import dataclass, PyTreeNode

from chip8x.constants import (
    PROGRAM_START, FONT_START, FONT_DATA, MEMORY_SIZE, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, NUM_REGISTERS, NUM_KEYS, Fault,
)


@dataclass(frozen=True)
class StackState:
    """Call stack for subroutine return addresses."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))


class MachineState(PyTreeNode):
    """Complete CHIP-8 machine state.

    The display is row-major: ``display[y, x]`` with shape (32, 64).
    ``fault`` holds a ``Fault`` code; anything but ``Fault.NONE`` halts the machine.
    """
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.asarray(PROGRAM_START, dtype=jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=jnp.bool_))
    stack: StackState = StackState()
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    fault: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    fault_opcode: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))


def create_state(rng: jax.random.PRNGKey = jax.random.PRNGKey(0)) -> MachineState:
    """Create initial machine state with font data loaded."""
    state = MachineState(rng)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))


def reset(state: MachineState, rng: jax.random.PRNGKey = None) -> MachineState:
    """Return the machine to its power-on state, keeping the random stream unless given a new key."""
    return create_state(state.rng if rng is None else rng)


def set_fault(state: MachineState, condition, fault: Fault) -> MachineState:
    """Record ``fault`` when ``condition`` holds and no earlier fault is pending."""
    triggered = condition & (state.fault == int(Fault.NONE))
    return state.replace(fault=jnp.where(triggered, jnp.uint8(int(fault)), state.fault))


def is_halted(state: MachineState) -> jnp.ndarray:
    """True once a fault has been recorded."""
    return state.fault != int(Fault.NONE)
