"""CHIP-8 system instructions (0x0xxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8x.constants import Fault
from chip8x.state import MachineState, set_fault
from chip8x.decode import DecodedInstruction
from chip8x.stack import pop, is_empty


def execute_unknown(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """Any opcode without a matching instruction."""
    return set_fault(state, True, Fault.UNKNOWN_OPCODE)


def execute_clear_screen(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))


def execute_return(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """00EE - Return from subroutine."""
    state = set_fault(state, is_empty(state.stack), Fault.STACK_UNDERFLOW)
    stack, address = pop(state.stack)
    return state.replace(stack=stack, pc=address)


def execute_system_instruction(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """Dispatch system instructions."""
    return jax.lax.cond(
        0x00E0 == instruction.raw,
        execute_clear_screen,
        lambda state, instruction: jax.lax.cond(
            0x00EE == instruction.raw,
            execute_return,
            execute_unknown,
            state, instruction
        ),
        state, instruction
    )
