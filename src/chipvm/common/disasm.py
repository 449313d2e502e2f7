''' Opcode to mnemonic translation, used by the CPU trace and chipvm-dis '''

import chipvm.common.ops as ops


ALU_MNEMONICS = {
    ops.MOV: 'LD',
    ops.OR: 'OR',
    ops.AND: 'AND',
    ops.XOR: 'XOR',
    ops.ADDC: 'ADD',
    ops.SUB: 'SUB',
    ops.SHR: 'SHR',
    ops.SUBN: 'SUBN',
    ops.SHL: 'SHL',
}

MISC_FORMATS = {
    ops.GDT: 'LD V{x:X}, DT',
    ops.WKEY: 'LD V{x:X}, K',
    ops.SDT: 'LD DT, V{x:X}',
    ops.SST: 'LD ST, V{x:X}',
    ops.ADDI: 'ADD I, V{x:X}',
    ops.FONT: 'LD F, V{x:X}',
    ops.BCD: 'LD B, V{x:X}',
    ops.STR: 'LD [I], V{x:X}',
    ops.LDR: 'LD V{x:X}, [I]',
}


def disassemble(opcode: int) -> str:
    x = (opcode >> 8) & 0xF
    y = (opcode >> 4) & 0xF
    n = opcode & 0xF
    nn = opcode & 0xFF
    nnn = opcode & 0xFFF

    match ops.family(opcode):
        case ops.SYS:
            if opcode == 0x00E0:
                return 'CLS'
            if opcode == 0x00EE:
                return 'RET'
            return f'SYS #{nnn:03X}'
        case ops.JP:
            return f'JP #{nnn:03X}'
        case ops.CALL:
            return f'CALL #{nnn:03X}'
        case ops.SE:
            return f'SE V{x:X}, #{nn:02X}'
        case ops.SNE:
            return f'SNE V{x:X}, #{nn:02X}'
        case ops.SER if n == 0:
            return f'SE V{x:X}, V{y:X}'
        case ops.LD:
            return f'LD V{x:X}, #{nn:02X}'
        case ops.ADD:
            return f'ADD V{x:X}, #{nn:02X}'
        case ops.ALU if n in ALU_MNEMONICS:
            if n in (ops.SHR, ops.SHL):
                return f'{ALU_MNEMONICS[n]} V{x:X}'
            return f'{ALU_MNEMONICS[n]} V{x:X}, V{y:X}'
        case ops.SNER if n == 0:
            return f'SNE V{x:X}, V{y:X}'
        case ops.LDI:
            return f'LD I, #{nnn:03X}'
        case ops.JPV0:
            return f'JP V0, #{nnn:03X}'
        case ops.RND:
            return f'RND V{x:X}, #{nn:02X}'
        case ops.DRW:
            return f'DRW V{x:X}, V{y:X}, {n}'
        case ops.KEY if nn == ops.SKP:
            return f'SKP V{x:X}'
        case ops.KEY if nn == ops.SKNP:
            return f'SKNP V{x:X}'
        case ops.MISC if nn in MISC_FORMATS:
            return MISC_FORMATS[nn].format(x=x)

    return f'DW #{opcode:04X}'
