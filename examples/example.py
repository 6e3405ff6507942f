import time

import jax

from chip8x import create_state, load_program, run_frame, get_display
from chip8x.rendering import save_screenshot

# Draws the sixteen font glyphs in two rows, then spins.
#   V0 = glyph, V1 = x, V2 = y
PROGRAM = bytes([
    0x60, 0x00,  # 200: V0 = 0
    0x61, 0x00,  # 202: V1 = 0
    0x62, 0x00,  # 204: V2 = 0
    0xF0, 0x29,  # 206: I = glyph(V0)
    0xD1, 0x25,  # 208: draw 8x5 at (V1, V2)
    0x70, 0x01,  # 20A: V0 += 1
    0x71, 0x08,  # 20C: V1 += 8
    0x30, 0x08,  # 20E: skip if V0 == 8
    0x12, 0x14,  # 210: jump 214
    0x72, 0x08,  # 212: V2 += 8 (second row)
    0x31, 0x40,  # 214: skip if V1 == 64
    0x12, 0x1A,  # 216: jump 21A
    0x61, 0x00,  # 218: V1 = 0
    0x30, 0x10,  # 21A: skip if V0 == 16
    0x12, 0x06,  # 21C: jump 206
    0x12, 0x1E,  # 21E: jump self
])

if __name__ == "__main__":
    state = load_program(create_state(jax.random.PRNGKey(0)), PROGRAM)

    @jax.jit
    def rollout(state):
        def frame(state, _):
            state, beep = run_frame(state, 10)
            return state, beep
        return jax.lax.scan(frame, state, length=60)

    start_compile = time.time()
    compiled = jax.block_until_ready(rollout.lower(state).compile())
    print("Compilation time (s):", time.time() - start_compile)

    start_exec = time.time()
    final_state, _ = jax.block_until_ready(compiled(state))
    print("Execution time (s):", time.time() - start_exec)

    save_screenshot(get_display(final_state), "glyphs.png")
    print("Saved glyphs.png")
