from pathlib import Path

from chipvm.common.settings import Settings
from chipvm.sasm.asm import assemble
from chipvm.runtime.emulator import Machine


def find_file(filename: str) -> Path:
    return Path(__file__).parent / filename


def load_file(filename: str) -> str:
    return find_file(filename).read_text()


def machine_from_source(source: str, **cpu_args) -> Machine:
    rom = assemble(source)
    return Machine.from_rom(rom, Settings(), **cpu_args)


def machine_from_bytes(rom: bytes, **cpu_args) -> Machine:
    return Machine.from_rom(rom, Settings(), **cpu_args)


def run_source(source: str, steps: int, **cpu_args) -> Machine:
    machine = machine_from_source(source, **cpu_args)

    for _ in range(steps):
        machine.proc.step()

    return machine
