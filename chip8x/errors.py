"""Host-side exceptions for the CHIP-8 core.

Inside jitted code faults are recorded as ``MachineState.fault`` codes;
``raise_for_fault`` turns a recorded code into one of the exceptions below.
"""

from typing import Optional

from chip8x.constants import Fault, MAX_PROGRAM_SIZE, NUM_KEYS


class Chip8Error(Exception):
    """Base class for all errors raised by chip8x."""


class ProgramTooLargeError(Chip8Error):
    """Program image does not fit between 0x200 and the end of memory."""

    def __init__(self, size: int):
        self.size = size
        super().__init__(f"Program is {size} bytes, at most {MAX_PROGRAM_SIZE} fit in memory")


class KeyIndexError(Chip8Error, ValueError):
    """Keypad index outside 0..15."""

    def __init__(self, index):
        self.index = index
        super().__init__(f"Key index {index!r} outside 0..{NUM_KEYS - 1}")


class MachineFault(Chip8Error):
    """A fault recorded by the machine while executing a program.

    ``opcode`` is None when the fault happened before an opcode was fetched.
    """
    fault = Fault.NONE

    def __init__(self, pc: int, opcode: Optional[int] = None):
        self.pc = pc
        self.opcode = opcode
        where = f"pc 0x{pc:03X}" if opcode is None else f"opcode 0x{opcode:04X}, pc 0x{pc:03X}"
        super().__init__(f"{self.describe()} ({where})")

    def describe(self) -> str:
        return self.fault.name.replace("_", " ").lower()


class UnknownOpcodeError(MachineFault):
    fault = Fault.UNKNOWN_OPCODE

    def describe(self) -> str:
        return f"unknown opcode 0x{self.opcode:04X}"


class OutOfBoundsError(MachineFault):
    fault = Fault.OUT_OF_BOUNDS


class FetchOutOfBoundsError(OutOfBoundsError):
    """The program counter ran off the end of memory."""
    fault = Fault.FETCH_OUT_OF_BOUNDS

    def describe(self) -> str:
        return "fetch out of bounds"


class StackOverflowError(MachineFault):
    fault = Fault.STACK_OVERFLOW


class StackUnderflowError(MachineFault):
    fault = Fault.STACK_UNDERFLOW


FAULT_ERRORS = {
    error.fault: error
    for error in (
        UnknownOpcodeError, OutOfBoundsError, FetchOutOfBoundsError,
        StackOverflowError, StackUnderflowError,
    )
}


def raise_for_fault(state) -> None:
    """Raise the exception matching ``state.fault``, if any."""
    fault = Fault(int(state.fault))
    if fault == Fault.NONE:
        return
    opcode = None if fault == Fault.FETCH_OUT_OF_BOUNDS else int(state.fault_opcode)
    raise FAULT_ERRORS[fault](pc=int(state.pc), opcode=opcode)
