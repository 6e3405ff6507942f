"""Tests for the console logger and the frame progress bar."""

import jax
import jax.numpy as jnp
import pytest

import chip8x.logging
from chip8x.logging import ConsoleLogger, frame_progress


class FakeBar:
    def __init__(self, total, **kwargs):
        self.total = total
        self.n = 0
        self.updates = []
        self.closed = False

    def update(self, count):
        self.updates.append(count)
        self.n += count

    def close(self):
        self.closed = True


@pytest.fixture
def bars(monkeypatch):
    created = []

    def fake_tqdm(*args, **kwargs):
        bar = FakeBar(*args, **kwargs)
        created.append(bar)
        return bar

    monkeypatch.setattr(chip8x.logging, "tqdm", fake_tqdm)
    return created


@pytest.mark.parametrize("n_frames, print_rate", [(600, None), (4, None), (7, 3), (9, 3), (5, 50)])
def test_progress_reaches_total(bars, n_frames, print_rate):
    body = frame_progress(n_frames, print_rate=print_rate)(lambda carry, frame: (carry + 1, None))

    carry, _ = jax.lax.scan(body, 0, jnp.arange(n_frames))
    jax.effects_barrier()

    assert int(carry) == n_frames
    assert len(bars) == 1
    assert bars[0].total == n_frames
    assert bars[0].n == n_frames
    assert bars[0].closed


def test_progress_update_sizes(bars):
    body = frame_progress(7, print_rate=3)(lambda carry, frame: (carry, None))

    jax.lax.scan(body, 0, jnp.arange(7))
    jax.effects_barrier()

    assert bars[0].updates == [3, 3, 1]


def test_progress_under_jit(bars):
    @jax.jit
    def run(carry):
        body = frame_progress(10, print_rate=4)(lambda c, frame: (c + frame, None))
        return jax.lax.scan(body, carry, jnp.arange(10))[0]

    assert int(run(0)) == 45
    jax.effects_barrier()
    assert bars[0].n == 10


def test_logger_filters_below_level(capsys):
    logger = ConsoleLogger(log_level="WARNING", show_timestamps=False)

    logger.info("hidden")
    logger.warning("shown")

    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "[ WARNING][chip8x] shown" in out


def test_logger_machine_state_only_at_debug(capsys, fresh_state):
    ConsoleLogger(log_level="INFO").log_machine_state(fresh_state)
    assert capsys.readouterr().out == ""

    ConsoleLogger(log_level="DEBUG", show_timestamps=False).log_machine_state(fresh_state)
    out = capsys.readouterr().out
    assert "PC=0x200" in out
    assert "VF=00" in out
