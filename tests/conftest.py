"""Test configuration and fixtures for CHIP-8 machine tests."""

import jax
import jax.numpy as jnp
import pytest
from chip8x import create_state, execute, load_program


@pytest.fixture
def fresh_state():
    """Provide a fresh machine state for each test."""
    return create_state()


@pytest.fixture(scope="session")
def jitted_execute():
    """Compiled ``execute`` for tests that sweep many operand values."""
    return jax.jit(execute)


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def assemble(*opcodes):
    """Encode opcodes as a big-endian program image."""
    return b"".join(op.to_bytes(2, "big") for op in opcodes)


def program_state(*opcodes):
    """Fresh state with the given opcodes loaded at 0x200."""
    return load_program(create_state(), assemble(*opcodes))
