from pathlib import Path
import logging as lg
from typing import Tuple, cast

import click

from chipvm.common.hwconf import ROM_BASE, ROM_MAX_SIZE
from chipvm.sasm.fpp import FPP, AsmError
import chipvm.sasm.grammar as grammar


def assemble(source: str, origin: int = ROM_BASE) -> bytes:
    return assemble_sources([source], origin)


def assemble_sources(sources: list[str], origin: int = ROM_BASE) -> bytes:
    # First pass
    first_pass = FPP(origin)

    for source in sources:
        actions = grammar.program.parse_string(source)

        for (func, arg) in actions:  # type: ignore
            func(first_pass, arg)

    # Second pass
    bytestr = bytearray()

    for (t, d) in first_pass.cmd_list:
        new_bytes = bytes()

        if t == 'bytes':
            new_bytes = d

        if t == 'ref':
            (_, labelname, template, width) = cast(Tuple[int, str, int, int], d)

            if labelname not in first_pass.label_dict:
                raise AsmError(f'Unknown label {labelname}')

            address = first_pass.label_dict[labelname]

            if address > 0xFFF:
                raise AsmError(f'Label {labelname} at 0x{address:X} is out of reach')

            new_bytes = (template | address).to_bytes(width, 'big')

        bytestr += cast(bytes, new_bytes)

    if len(bytestr) > ROM_MAX_SIZE:
        raise AsmError(f'Program is {len(bytestr)} bytes, at most {ROM_MAX_SIZE} fit')

    # Dumping results
    return bytes(bytestr)


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.argument('sources', nargs=-1, type=Path)
@click.argument('binary', type=Path)
def compile(verbose: bool, sources: Tuple[Path], binary: Path):
    lg.basicConfig(level=lg.DEBUG if verbose else lg.INFO)
    lg.info("CHIPVM ASM")

    for source in sources:
        lg.info(f'Processing {source}')

    bytestr = assemble_sources([source.read_text() for source in sources])
    binary.parent.mkdir(parents=True, exist_ok=True)
    binary.write_bytes(bytestr)
    lg.info(f'Wrote {len(bytestr)} bytes to {binary}')


if __name__ == "__main__":
    compile()
