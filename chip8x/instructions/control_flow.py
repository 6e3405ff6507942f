"""CHIP-8 control flow instructions."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8x.constants import Fault, NUM_KEYS
from chip8x.state import MachineState, set_fault
from chip8x.decode import DecodedInstruction
from chip8x.stack import push, is_full
from chip8x.instructions.system import execute_unknown


def execute_jump(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.astype(instruction.nnn, jnp.uint16))


def execute_call(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """2NNN - Call subroutine at NNN."""
    state = set_fault(state, is_full(state.stack), Fault.STACK_OVERFLOW)
    state = state.replace(stack=push(state.stack, state.pc))
    return execute_jump(state, instruction)


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: MachineState, instruction: DecodedInstruction) -> MachineState:
        condition = condition_fn(state, instruction)
        return jax.lax.cond(
            condition,
            lambda s: s.replace(pc=s.pc + 2),
            lambda s: s,
            state
        )
    return skip_instruction


def require_zero_n(execute_fn):
    """5XY0/9XY0 only decode with a zero low nibble."""
    def checked(state: MachineState, instruction: DecodedInstruction) -> MachineState:
        return jax.lax.cond(
            instruction.n == 0,
            execute_fn,
            execute_unknown,
            state, instruction
        )
    return checked


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = require_zero_n(make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
))

execute_skip_if_not_equal_register = require_zero_n(make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
))


def execute_jump_with_offset(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """BNNN - Jump to address NNN + V0."""
    jump_address = jnp.astype(instruction.nnn, jnp.uint16) + jnp.astype(state.V[0], jnp.uint16)
    return state.replace(pc=jump_address)


def _skip_if_key(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    key_index = state.V[instruction.x]
    state = set_fault(state, key_index >= NUM_KEYS, Fault.OUT_OF_BOUNDS)
    key_pressed = state.keypad[key_index]
    is_not_instruction = (instruction.nn == 0xA1)
    condition = key_pressed ^ is_not_instruction

    return jax.lax.cond(
        condition,
        lambda state: state.replace(pc=state.pc + 2),
        lambda state: state,
        state
    )


def execute_skip_if_key(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """EX9E/EXA1 - Skip if key pressed/not pressed."""
    return jax.lax.cond(
        (instruction.nn == 0x9E) | (instruction.nn == 0xA1),
        _skip_if_key,
        execute_unknown,
        state, instruction
    )
