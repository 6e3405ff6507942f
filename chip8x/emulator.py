"""Main CHIP-8 emulator execution engine."""

import operator
from functools import partial

import jax
import jax.lax
import jax.numpy as jnp
from chip8x.state import MachineState, set_fault, is_halted
from chip8x.decode import decode
from chip8x.constants import PROGRAM_START, MEMORY_SIZE, MAX_PROGRAM_SIZE, NUM_KEYS, Fault
from chip8x.errors import ProgramTooLargeError, KeyIndexError, raise_for_fault
from chip8x.instructions.system import execute_system_instruction
from chip8x.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset, execute_skip_if_key
)
from chip8x.instructions.alu import execute_alu_operation
from chip8x.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8x.instructions.display import execute_display
from chip8x.instructions.misc import execute_misc_instruction


def execute(state: MachineState, instruction: int) -> MachineState:
    """Execute single CHIP-8 instruction.

    A faulting instruction leaves the state untouched apart from the fault
    fields. A halted state is returned unchanged.
    """
    decoded_instruction = decode(instruction)

    new_state = jax.lax.switch(
        decoded_instruction.opcode,
        [
            execute_system_instruction,
            execute_jump,
            execute_call,
            execute_skip_if_equal_immediate,
            execute_skip_if_not_equal_immediate,
            execute_skip_if_equal_register,
            execute_set,
            execute_add,
            execute_alu_operation,
            execute_skip_if_not_equal_register,
            execute_set_index,
            execute_jump_with_offset,
            execute_random,
            execute_display,
            execute_skip_if_key,
            execute_misc_instruction,
        ],
        state, decoded_instruction
    )

    was_halted = is_halted(state)
    faulted = is_halted(new_state) & ~was_halted
    kept = jax.tree.map(lambda old, new: jnp.where(was_halted | faulted, old, new), state, new_state)
    return kept.replace(
        fault=jnp.where(was_halted, state.fault, new_state.fault),
        fault_opcode=jnp.where(faulted, jnp.asarray(instruction, dtype=jnp.uint16), state.fault_opcode),
    )


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: MachineState) -> tuple[MachineState, jnp.uint16]:
    """Fetch next instruction from memory and advance pc by 2."""
    out_of_bounds = jnp.astype(state.pc, jnp.int32) + 1 >= MEMORY_SIZE
    instruction = _pack_u16(state.memory[state.pc], state.memory[jnp.minimum(state.pc + 1, MEMORY_SIZE - 1)])
    halted = is_halted(state) | out_of_bounds
    state = set_fault(state, out_of_bounds, Fault.FETCH_OUT_OF_BOUNDS)
    state = state.replace(pc=jnp.where(halted, state.pc, state.pc + 2))
    return state, instruction


def step(state: MachineState) -> MachineState:
    """Run one fetch/decode/execute cycle. Faults are recorded, never raised."""
    state, instruction = fetch(state)
    return execute(state, instruction)


def tick(state: MachineState) -> MachineState:
    """Run one cycle and raise if it faulted."""
    state = step(state)
    raise_for_fault(state)
    return state


def _run_cycle(state, _):
    return step(state), None


@partial(jax.jit, static_argnums=1)
def run_cycles(state: MachineState, n: int) -> MachineState:
    """Run ``n`` cycles as one compiled scan. Stops making progress once halted."""
    state, _ = jax.lax.scan(_run_cycle, state, length=n)
    return state


def tick_timers(state: MachineState) -> tuple[MachineState, jnp.ndarray]:
    """Decrement both timers once (one display frame).

    Returns the new state and whether the sound timer just went from 1 to 0.
    """
    beep = state.sound_timer == 1
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    ), beep


def sound_active(state: MachineState) -> jnp.ndarray:
    """True while the sound timer is running."""
    return state.sound_timer > 0


@partial(jax.jit, static_argnums=1)
def run_frame(state: MachineState, cycles_per_frame: int) -> tuple[MachineState, jnp.ndarray]:
    """Run one display frame worth of cycles, then tick the timers."""
    state, _ = jax.lax.scan(_run_cycle, state, length=cycles_per_frame)
    return tick_timers(state)


def load_program(state: MachineState, data: bytes) -> MachineState:
    """Copy a program image into memory at 0x200."""
    if len(data) > MAX_PROGRAM_SIZE:
        raise ProgramTooLargeError(len(data))
    program = jnp.array(list(data), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(data)].set(program)
    return state.replace(memory=new_memory)


def load_rom(state: MachineState, filename: str) -> MachineState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data)


def keypress(state: MachineState, index: int, pressed: bool) -> MachineState:
    """Set the state of one keypad key."""
    try:
        key = operator.index(index)
    except TypeError:
        raise KeyIndexError(index) from None
    if not 0 <= key < NUM_KEYS:
        raise KeyIndexError(key)
    return state.replace(keypad=state.keypad.at[key].set(bool(pressed)))


def get_display(state: MachineState) -> jnp.ndarray:
    """Current framebuffer, shape (32, 64), indexed [y, x]."""
    return state.display
