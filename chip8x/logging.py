"""Console logging for chip8x.

A levelled console logger for the frontend, and a tqdm progress bar that
follows a compiled ``lax.scan`` over display frames through io_callback.
"""

import sys
import time
from typing import Callable, Optional

import jax
import jax.numpy as jnp
from jax.experimental import io_callback

from tqdm import tqdm

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
RESET_COLOR = "\033[0m"


class ConsoleLogger:
    """Prints ``[elapsed][LEVEL][name] message`` lines to stdout.

    Colors are only used when stdout is a terminal.
    """

    def __init__(
        self,
        name: str = "chip8x",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        self.name = name
        self.threshold = LEVELS.index(log_level.upper())
        self.use_colors = use_colors and sys.stdout.isatty()
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

    def enabled_for(self, level: str) -> bool:
        return LEVELS.index(level) >= self.threshold

    def log(self, level: str, message: str):
        level = level.upper()
        if not self.enabled_for(level):
            return
        tag = f"[{level:>8s}]"
        if self.use_colors:
            tag = f"{LEVEL_COLORS[level]}{tag}{RESET_COLOR}"
        elapsed = f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        print(f"{elapsed}{tag}[{self.name}] {message}", flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)

    def log_machine_state(self, state):
        """Dump registers and timers at DEBUG level."""
        if not self.enabled_for("DEBUG"):
            return
        self.debug(
            f"PC=0x{int(state.pc):03X} I=0x{int(state.I):03X} SP={int(state.stack.pointer)} "
            f"DT={int(state.delay_timer)} ST={int(state.sound_timer)}"
        )
        self.debug(" ".join(f"V{i:X}={int(v):02X}" for i, v in enumerate(state.V)))


def frame_progress(
    n_frames: int,
    print_rate: Optional[int] = None,
    desc: str = "Running",
) -> Callable:
    """Decorate a scan body run over ``jnp.arange(n_frames)`` with a tqdm bar.

    The bar opens before frame 0, advances every ``print_rate`` completed
    frames and is closed at ``n_frames``/``n_frames``.
    """
    if print_rate is None:
        print_rate = max(1, min(n_frames // 20, 50))
    print_rate = max(1, min(print_rate, n_frames))
    tail = n_frames % print_rate or print_rate

    bars = {}

    def _open():
        bars["bar"] = tqdm(total=n_frames, desc=desc, unit="frame")

    def _advance(count):
        bars["bar"].update(int(count))

    def _close():
        bars.pop("bar").close()

    def decorator(body):
        def body_with_progress(carry, frame):
            jax.lax.cond(
                frame == 0,
                lambda _: io_callback(_open, None, ordered=True),
                lambda _: None,
                operand=None,
            )

            result = body(carry, frame)

            done = frame + 1
            count = jnp.where(done == n_frames, tail, print_rate)
            jax.lax.cond(
                (done % print_rate == 0) | (done == n_frames),
                lambda c: io_callback(_advance, None, c, ordered=True),
                lambda c: None,
                count,
            )
            jax.lax.cond(
                done == n_frames,
                lambda _: io_callback(_close, None, ordered=True),
                lambda _: None,
                operand=None,
            )
            return result

        return body_with_progress

    return decorator
