from pathlib import Path
import logging as lg
from typing import Iterator

import click

from chipvm.common.hwconf import ROM_BASE
from chipvm.common.disasm import disassemble


def listing(rom: bytes, base: int = ROM_BASE) -> Iterator[str]:
    for offset in range(0, len(rom) - 1, 2):
        opcode = rom[offset] << 8 | rom[offset + 1]
        yield f'{base + offset:03X}: {opcode:04X}  {disassemble(opcode)}'

    if len(rom) % 2:
        yield f'{base + len(rom) - 1:03X}: {rom[-1]:02X}    DB #{rom[-1]:02X}'


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.option('--base', default=hex(ROM_BASE), help='Load address of the image')
@click.argument('rom_filename', type=Path)
def dump(verbose: bool, base: str, rom_filename: Path):
    lg.basicConfig(level=lg.DEBUG if verbose else lg.INFO)

    rom = rom_filename.read_bytes()
    lg.debug(f'{rom_filename}: {len(rom)} bytes')

    for line in listing(rom, int(base, 0)):
        click.echo(line)


if __name__ == '__main__':
    dump()
