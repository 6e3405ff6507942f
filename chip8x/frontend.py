"""Pygame frontend and command line entry point for chip8x."""

import argparse
import sys
from functools import partial

import jax
import jax.numpy as jnp
import pygame

from chip8x.constants import SCREEN_WIDTH, SCREEN_HEIGHT
from chip8x.emulator import run_frame, load_rom, keypress, get_display
from chip8x.errors import Chip8Error, MachineFault, raise_for_fault
from chip8x.logging import ConsoleLogger, frame_progress
from chip8x.rendering import display_to_rgb, create_color_scheme, save_screenshot, COLOR_SCHEMES
from chip8x.state import MachineState, create_state, reset

FPS = 60
DEFAULT_SCALE = 15
DEFAULT_CYCLES_PER_FRAME = 10

# 1 2 3 C / 4 5 6 D / 7 8 9 E / A 0 B F on the left-hand block of a QWERTY keyboard
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}


@partial(jax.jit, static_argnums=(1, 2, 3))
def run_frames(state: MachineState, frames: int, cycles_per_frame: int, show_progress: bool = False):
    """Run ``frames`` display frames without a window.

    Returns the final state and the number of times the sound timer expired.
    """
    def frame(state, _):
        return run_frame(state, cycles_per_frame)

    if show_progress:
        frame = frame_progress(frames, desc="Running ROM")(frame)

    state, beeps = jax.lax.scan(frame, state, jnp.arange(frames))
    return state, jnp.sum(beeps)


def run_headless(state: MachineState, args, logger: ConsoleLogger) -> int:
    state, beeps = run_frames(state, args.frames, args.cycles_per_frame, not args.no_progress)
    logger.info(f"Ran {args.frames} frames, sound timer expired {int(beeps)} times")
    logger.log_machine_state(state)

    if args.screenshot:
        save_screenshot(get_display(state), args.screenshot, scale=args.scale, color_scheme=args.color_scheme)
        logger.info(f"Saved screenshot to {args.screenshot}")

    try:
        raise_for_fault(state)
    except MachineFault as e:
        logger.error(f"Machine fault: {e}")
        return 1
    return 0


def run_window(state: MachineState, args, logger: ConsoleLogger) -> int:
    """Interactive loop: fixed cycles per frame, timers ticked once per frame."""
    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH * args.scale, SCREEN_HEIGHT * args.scale))
    pygame.display.set_caption("chip8x")
    clock = pygame.time.Clock()
    on_color, off_color = create_color_scheme(args.color_scheme)

    running = True
    paused = False
    logger.info("Controls: ESC=Quit, P=Pause, Backspace=Reset")

    try:
        while running:
            clock.tick(FPS)

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_p:
                        paused = not paused
                        logger.info("Paused" if paused else "Resumed")
                    elif event.key == pygame.K_BACKSPACE:
                        state = load_rom(reset(state), args.rom)
                        paused = False
                        logger.info("Reset")
                    elif event.key in KEY_MAP:
                        state = keypress(state, KEY_MAP[event.key], True)
                elif event.type == pygame.KEYUP:
                    if event.key in KEY_MAP:
                        state = keypress(state, KEY_MAP[event.key], False)

            if not paused:
                state, beep = run_frame(state, args.cycles_per_frame)
                if beep:
                    logger.debug("Beep")
                try:
                    raise_for_fault(state)
                except MachineFault as e:
                    logger.error(f"Machine fault: {e}")
                    logger.log_machine_state(state)
                    paused = True

            frame = display_to_rgb(get_display(state), args.scale, on_color, off_color)
            # pygame surfaces are indexed [x, y]
            pygame.surfarray.blit_array(screen, frame.swapaxes(0, 1))
            pygame.display.flip()
    finally:
        pygame.quit()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chip8x", description="Run a CHIP-8 ROM.")
    parser.add_argument("rom", help="path to the ROM image")
    parser.add_argument("--scale", type=int, default=DEFAULT_SCALE, help="pixel upscaling factor")
    parser.add_argument("--cycles-per-frame", type=int, default=DEFAULT_CYCLES_PER_FRAME,
                        help="instructions executed per 60 Hz frame")
    parser.add_argument("--color-scheme", choices=sorted(COLOR_SCHEMES), default="classic")
    parser.add_argument("--seed", type=int, default=0, help="seed for the CXNN random source")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--headless", action="store_true", help="run without a window")
    parser.add_argument("--frames", type=int, default=600, help="frames to run in headless mode")
    parser.add_argument("--screenshot", help="save the final framebuffer as an image (headless mode)")
    parser.add_argument("--no-progress", action="store_true", help="hide the headless progress bar")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logger = ConsoleLogger(log_level=args.log_level)

    state = create_state(jax.random.PRNGKey(args.seed))
    try:
        state = load_rom(state, args.rom)
    except (OSError, Chip8Error) as e:
        logger.error(f"Could not load {args.rom}: {e}")
        return 1
    logger.info(f"Loaded {args.rom}")

    if args.headless:
        return run_headless(state, args, logger)
    return run_window(state, args, logger)


if __name__ == "__main__":
    sys.exit(main())
