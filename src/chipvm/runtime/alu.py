''' Register-to-register ALU (8xyn). Each operation maps the original
    operand values to (result, flag); flag is None when VF is untouched. '''

from typing import Callable

import chipvm.common.ops as ops


AluResult = tuple[int, int | None]
AluOp = Callable[[int, int], AluResult]


def mov(vx: int, vy: int) -> AluResult:
    return vy, None


def bor(vx: int, vy: int) -> AluResult:
    return vx | vy, None


def band(vx: int, vy: int) -> AluResult:
    return vx & vy, None


def xor(vx: int, vy: int) -> AluResult:
    return vx ^ vy, None


def addc(vx: int, vy: int) -> AluResult:
    total = vx + vy
    return total & 0xFF, int(total > 0xFF)


def sub(vx: int, vy: int) -> AluResult:
    return (vx - vy) & 0xFF, int(vx >= vy)


def shr(vx: int, vy: int) -> AluResult:
    return vx >> 1, vx & 0x01


def subn(vx: int, vy: int) -> AluResult:
    return (vy - vx) & 0xFF, int(vy >= vx)


def shl(vx: int, vy: int) -> AluResult:
    return (vx << 1) & 0xFF, (vx >> 7) & 0x01


OPERATIONS: dict[int, AluOp] = {
    ops.MOV: mov,
    ops.OR: bor,
    ops.AND: band,
    ops.XOR: xor,
    ops.ADDC: addc,
    ops.SUB: sub,
    ops.SHR: shr,
    ops.SUBN: subn,
    ops.SHL: shl,
}
