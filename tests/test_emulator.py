# type: ignore
import io
import itertools

import pytest
from click.testing import CliRunner

import chipvm.runtime.emulator as emulator
from chipvm.common.hwconf import ROM_BASE, ROM_MAX_SIZE
from chipvm.runtime.frontend import HeadlessFrontend
from chipvm.runtime.state import MachineState
from chipvm.sasm.asm import assemble

import unit_utils
from fixtures import with_settings  # noqa: F401


def stepping_clock(step: float = 0.02):
    ticks = itertools.count()
    return lambda: next(ticks) * step


def build(source: str, settings, frontend=None, clock=None):
    machine = emulator.Machine.from_rom(assemble(source), settings)
    frontend = HeadlessFrontend() if frontend is None else frontend
    clock = stepping_clock() if clock is None else clock
    return emulator.Emulator(machine, frontend, settings, clock=clock, sleep=lambda _: None)


# - Loading - #

def test_load_rom():
    state = MachineState()

    emulator.load_rom(state, bytes([0x12, 0x34]))

    assert state.memory[ROM_BASE:ROM_BASE + 2] == bytes([0x12, 0x34])
    assert state.pc == ROM_BASE


def test_load_largest_rom():
    state = MachineState()

    emulator.load_rom(state, bytes([0xAA]) * ROM_MAX_SIZE)

    assert state.memory[-1] == 0xAA


def test_load_oversized_rom():
    with pytest.raises(emulator.LoadError):
        emulator.load_rom(MachineState(), bytes(ROM_MAX_SIZE + 1))


def test_load_empty_rom():
    with pytest.raises(emulator.LoadError):
        emulator.load_rom(MachineState(), bytes())


def test_read_missing_rom(tmp_path):
    with pytest.raises(emulator.LoadError):
        emulator.read_rom(tmp_path / 'missing.ch8')


def test_font_is_preloaded(with_settings):
    machine = emulator.Machine.from_rom(bytes([0x00, 0xE0]), with_settings)

    assert machine.state.memory[0:5] == bytes([0xF0, 0x90, 0x90, 0x90, 0xF0])


def test_font_can_be_skipped(with_settings):
    machine = emulator.Machine.from_rom(bytes([0x00, 0xE0]), with_settings.update(load_font=False))

    assert machine.state.memory[0:80] == bytes(80)


# - Host loop - #

def test_timers_follow_the_clock(with_settings):
    emu = build(unit_utils.load_file('testdata/programs/countdown.8s'), with_settings.update(cycles_per_frame=4))
    state = emu.machine.state

    emu.run(2)
    assert state.v[2] == 0
    assert state.timers.delay == 1

    emu.run(6)
    assert state.v[2] == 0xFF
    assert state.timers.delay == 0


def test_timers_decoupled_from_cycles(with_settings):
    emu = build(
        unit_utils.load_file('testdata/programs/countdown.8s'),
        with_settings.update(cycles_per_frame=50),
        clock=lambda: 0.0
    )

    emu.run(10)

    assert emu.machine.state.timers.delay == 3
    assert emu.machine.state.v[2] == 0


def test_render_only_when_drawn(with_settings):
    frontend = HeadlessFrontend()
    emu = build(unit_utils.load_file('testdata/programs/digits.8s'), with_settings.update(cycles_per_frame=20), frontend)

    emu.run(5)

    assert frontend.frames == 1
    assert not emu.machine.state.draw_flag
    assert frontend.last == emu.machine.state.display.snapshot()


def test_digits_program(with_settings):
    stream = io.StringIO()
    emu = build(
        unit_utils.load_file('testdata/programs/digits.8s'),
        with_settings.update(cycles_per_frame=20),
        HeadlessFrontend(stream=stream)
    )

    emu.run(3)

    display = emu.machine.state.display
    expected = unit_utils.load_file('testdata/programs/digits.log').splitlines()
    text = display.to_text(on='#', off='.').splitlines()
    assert [row[:14] for row in text[:5]] == expected
    assert display.lit_count() == 30
    assert stream.getvalue().count('█') == 30


def test_quit_event(with_settings):
    frontend = HeadlessFrontend(script={1: [('escape', True)]})
    emu = build('loop: JP loop', with_settings, frontend)

    assert emu.run() == 1


def test_scripted_keys(with_settings):
    frontend = HeadlessFrontend(script={0: [('q', True)], 2: [('q', False)]})
    emu = build('LD V1, K\nloop: JP loop', with_settings.update(cycles_per_frame=1), frontend)

    emu.run(1)
    assert emu.machine.state.keypad.is_pressed(0x4)

    emu.run(4)
    assert emu.machine.state.v[1] == 0x4
    assert emu.machine.state.pc == 0x202


def test_sound_surfaced(with_settings):
    frontend = HeadlessFrontend()
    emu = build('LD V1, 2\nLD ST, V1\nloop: JP loop', with_settings.update(cycles_per_frame=2), frontend)

    emu.run(1)
    assert frontend.sound_active

    emu.run(2)
    assert not frontend.sound_active


def test_execute_closes_frontend(with_settings):
    closed = []
    frontend = HeadlessFrontend()
    frontend.close = lambda: closed.append(True)

    machine = emulator.execute(assemble('loop: JP loop'), with_settings, frontend, max_frames=3)

    assert closed == [True]
    assert machine.state.pc == 0x200


# - Command line - #

def test_cli_headless(tmp_path):
    rom = tmp_path / 'digits.ch8'
    rom.write_bytes(assemble(unit_utils.load_file('testdata/programs/digits.8s')))

    result = CliRunner().invoke(emulator.run, ['--headless', '--frames', '3', '--cycles', '10', str(rom)])

    assert result.exit_code == emulator.EXIT_OK
    assert '█' in result.output


def test_cli_missing_rom(tmp_path):
    result = CliRunner().invoke(emulator.run, ['--headless', str(tmp_path / 'nope.ch8')])

    assert result.exit_code == emulator.EXIT_LOAD_ERROR


def test_cli_machine_fault(tmp_path):
    rom = tmp_path / 'ret.ch8'
    rom.write_bytes(assemble('RET'))

    result = CliRunner().invoke(emulator.run, ['--headless', '--frames', '1', str(rom)])

    assert result.exit_code == emulator.EXIT_FAULT


def test_cli_config(tmp_path):
    config = tmp_path / 'chipvm.toml'
    config.write_text('[run]\ncycles_per_frame = 1\nframe_delay_ms = 0\n')
    rom = tmp_path / 'loop.ch8'
    rom.write_bytes(assemble('loop: JP loop'))

    result = CliRunner().invoke(emulator.run, ['--headless', '--frames', '2', '-c', str(config), str(rom)])

    assert result.exit_code == emulator.EXIT_OK


@pytest.mark.parametrize('args', [['--cycles', '0'], ['--scale', '-1']])
def test_cli_bad_option(tmp_path, args):
    rom = tmp_path / 'loop.ch8'
    rom.write_bytes(assemble('loop: JP loop'))

    result = CliRunner().invoke(emulator.run, ['--headless', '--frames', '1'] + args + [str(rom)])

    assert result.exit_code == emulator.EXIT_CONFIG_ERROR


@pytest.mark.parametrize('text', ['[run\ncycles_per_frame = 1\n', '[run]\ncycles_per_frame = "many"\n'])
def test_cli_bad_config(tmp_path, text):
    config = tmp_path / 'chipvm.toml'
    config.write_text(text)
    rom = tmp_path / 'loop.ch8'
    rom.write_bytes(assemble('loop: JP loop'))

    result = CliRunner().invoke(emulator.run, ['--headless', '--frames', '1', '-c', str(config), str(rom)])

    assert result.exit_code == emulator.EXIT_CONFIG_ERROR
