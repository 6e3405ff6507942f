"""JAX CHIP-8 virtual machine."""

from chip8x.state import MachineState, StackState, create_state, reset
from chip8x.emulator import (
    execute, fetch, step, tick, tick_timers, sound_active, run_cycles, run_frame,
    load_program, load_rom, keypress, get_display,
)
from chip8x.decode import DecodedInstruction, decode
from chip8x.constants import *
from chip8x.errors import (
    Chip8Error, ProgramTooLargeError, KeyIndexError, MachineFault, UnknownOpcodeError,
    OutOfBoundsError, FetchOutOfBoundsError, StackOverflowError, StackUnderflowError,
    raise_for_fault,
)

__all__ = [
    "MachineState",
    "StackState",
    "create_state",
    "reset",
    "fetch",
    "decode",
    "execute",
    "step",
    "tick",
    "tick_timers",
    "sound_active",
    "run_cycles",
    "run_frame",
    "load_program",
    "load_rom",
    "keypress",
    "get_display",
    "DecodedInstruction",
    "Fault",
    "PROGRAM_START",
    "FONT_START",
    "MEMORY_SIZE",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "Chip8Error",
    "ProgramTooLargeError",
    "KeyIndexError",
    "MachineFault",
    "UnknownOpcodeError",
    "OutOfBoundsError",
    "FetchOutOfBoundsError",
    "StackOverflowError",
    "StackUnderflowError",
    "raise_for_fault",
]
