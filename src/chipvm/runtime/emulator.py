import sys
import time
from pathlib import Path
import logging as lg
import traceback
from typing import Callable

import click

from chipvm.common.hwconf import ROM_BASE, ROM_MAX_SIZE
from chipvm.common.settings import Settings, load_settings
from chipvm.runtime.state import MachineState
from chipvm.runtime.timers import TimerClock
from chipvm.runtime.frontend import Frontend, create_frontend
import chipvm.runtime.cpu as cpu


EXIT_OK = 0
EXIT_LOAD_ERROR = 1
EXIT_FAULT = 2
EXIT_KEYBOARD = 3
EXIT_CONFIG_ERROR = 4
EXIT_EXEC_ERROR = 100


class LoadError(Exception):
    pass


def read_rom(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise LoadError(f'Failed to read ROM {path}: {e}') from e


def load_rom(state: MachineState, rom: bytes):
    size = len(rom)

    if size == 0:
        raise LoadError('ROM is empty')

    if size > ROM_MAX_SIZE:
        raise LoadError(f'ROM is {size} bytes, at most {ROM_MAX_SIZE} fit')

    rb = ROM_BASE
    state.memory[rb:rb + size] = rom
    lg.info(f'Loaded {size} bytes at 0x{rb:03X}')


class Machine:
    ''' Machine state plus the CPU executing against it '''
    state: MachineState
    proc: cpu.CPU

    def __init__(self, state: MachineState, proc: cpu.CPU):
        self.state = state
        self.proc = proc

    @classmethod
    def from_rom(cls, rom: bytes, settings: Settings | None = None, **cpu_args) -> 'Machine':
        settings = Settings() if settings is None else settings
        state = MachineState()

        if settings.load_font:
            state.load_font()

        load_rom(state, rom)
        return cls(state, cpu.CPU(state, **cpu_args))


class Emulator:
    ''' Host loop: input, N cycles, timers at 60Hz, render, idle '''

    def __init__(
        self,
        machine: Machine,
        frontend: Frontend,
        settings: Settings,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.machine = machine
        self.frontend = frontend
        self.settings = settings
        self.clock = clock
        self.sleep = sleep
        self.timer_clock = TimerClock(clock())
        self.frames = 0

        frontend.attach(machine.state.keypad)

    def run_frame(self) -> bool:
        ''' Returns False once quitting was requested '''
        state = self.machine.state
        proc = self.machine.proc

        if self.frontend.poll():
            lg.info('Quit requested')
            return False

        for _ in range(self.settings.cycles_per_frame):
            proc.step()

        if self.timer_clock.due(self.clock()):
            state.timers.tick()
            self.frontend.sound(state.timers.sound_active)

        if state.consume_draw():
            self.frontend.render(state.display.snapshot())

        self.frames += 1

        if self.settings.frame_delay_ms > 0:
            self.sleep(self.settings.frame_delay_ms / 1000.0)

        return True

    def run(self, max_frames: int | None = None) -> int:
        while max_frames is None or self.frames < max_frames:
            if not self.run_frame():
                break

        return self.frames


def execute(rom: bytes, settings: Settings, frontend: Frontend, max_frames: int | None = None) -> Machine:
    machine = Machine.from_rom(rom, settings)

    try:
        Emulator(machine, frontend, settings).run(max_frames)
    finally:
        frontend.close()

    return machine


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.option('-c', '--config', type=click.Path(exists=True, path_type=Path), help='TOML settings file')
@click.option('--cycles', type=int, help='Instructions executed per frame')
@click.option('--scale', type=int, help='Device pixels per machine pixel')
@click.option('--no-font', is_flag=True, help='Do not preload the hex font')
@click.option('--headless', is_flag=True, help='Print frames to stdout instead of opening a window')
@click.option('--frames', type=int, help='Stop after this many frames')
@click.argument('rom_filename', type=Path)
def run(
    verbose: bool,
    config: Path | None,
    cycles: int | None,
    scale: int | None,
    no_font: bool,
    headless: bool,
    frames: int | None,
    rom_filename: Path
):
    try:
        settings = load_settings(config).update(
            cycles_per_frame=cycles,
            scale=scale,
            verbose=verbose or None,
            load_font=False if no_font else None
        )
    except (ValueError, TypeError) as e:
        # tomllib.TOMLDecodeError is a ValueError
        lg.basicConfig(level=lg.INFO)
        lg.error(f'Bad settings: {e}')
        sys.exit(EXIT_CONFIG_ERROR)

    lg.basicConfig(level=lg.DEBUG if settings.verbose else lg.INFO)
    lg.info("CHIPVM")

    try:
        rom = read_rom(rom_filename)
        frontend = create_frontend(headless, settings.scale, settings.keymap)
        execute(rom, settings, frontend, frames)
        sys.exit(EXIT_OK)

    except LoadError as e:
        lg.error(f'Unable to load program: {e}')
        sys.exit(EXIT_LOAD_ERROR)

    except cpu.MachineFault as e:
        lg.error(f'Execution halted on machine fault: {e}')
        sys.exit(EXIT_FAULT)

    except KeyboardInterrupt:
        lg.info('Execution halted by the user')
        sys.exit(EXIT_KEYBOARD)

    except Exception as e:
        lg.info(f'Execution halted on general error {e}')
        traceback.print_exc()
        sys.exit(EXIT_EXEC_ERROR)


if __name__ == '__main__':
    run()
