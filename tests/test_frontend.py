"""Tests for the command line entry point (headless mode only)."""

import jax
import pytest

import chip8x.logging
from chip8x.frontend import main, build_parser
from conftest import assemble


@pytest.fixture
def rom_file(tmp_path):
    def write(*opcodes):
        path = tmp_path / "rom.ch8"
        path.write_bytes(assemble(*opcodes))
        return str(path)
    return write


def test_parser_defaults():
    args = build_parser().parse_args(["game.ch8"])
    assert args.rom == "game.ch8"
    assert args.cycles_per_frame == 10
    assert args.scale == 15
    assert not args.headless


def test_parser_requires_rom():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_headless_run(rom_file, tmp_path, capsys):
    # Draw glyph 0 at (0, 0) then spin
    rom = rom_file(0xA000, 0xD015, 0x1204)
    screenshot = tmp_path / "out.png"

    status = main([rom, "--headless", "--frames", "3", "--no-progress", "--screenshot", str(screenshot)])

    assert status == 0
    assert screenshot.exists()
    assert "Ran 3 frames" in capsys.readouterr().out


def test_headless_run_with_progress(rom_file, monkeypatch):
    bars = []

    class Bar:
        def __init__(self, total, **kwargs):
            self.total, self.n, self.closed = total, 0, False
            bars.append(self)

        def update(self, count):
            self.n += count

        def close(self):
            self.closed = True

    monkeypatch.setattr(chip8x.logging, "tqdm", Bar)

    assert main([rom_file(0x1200), "--headless", "--frames", "4"]) == 0
    jax.effects_barrier()

    assert bars[0].n == bars[0].total == 4
    assert bars[0].closed


def test_headless_reports_fault(rom_file, capsys):
    status = main([rom_file(0x6001, 0x8128), "--headless", "--frames", "2", "--no-progress"])

    assert status == 1
    assert "unknown opcode 0x8128" in capsys.readouterr().out


def test_missing_rom(tmp_path, capsys):
    status = main([str(tmp_path / "missing.ch8"), "--headless"])

    assert status == 1
    assert "Could not load" in capsys.readouterr().out


def test_oversized_rom(tmp_path):
    path = tmp_path / "big.ch8"
    path.write_bytes(bytes(4000))
    assert main([str(path), "--headless"]) == 1
