# type: ignore
''' Assembly grammar: Cowgod-style mnemonics, labels, DB/DW data '''

import pyparsing as pp

from chipvm.sasm.fpp import FPP


MNEMONICS = [
    'CLS', 'RET', 'SYS', 'JP', 'CALL', 'SE', 'SNE', 'LD', 'ADD', 'OR', 'AND',
    'XOR', 'SUB', 'SHR', 'SUBN', 'SHL', 'RND', 'DRW', 'SKP', 'SKNP'
]

KEYWORDS = ['I', 'DT', 'ST', 'K', 'F', 'B']


def parse_number(text: str) -> int:
    if text.startswith('#'):
        return int(text[1:], 16)

    if text.startswith('%'):
        return int(text[1:], 2)

    return int(text, 0) if text.lower().startswith('0x') else int(text)


id = pp.Word(pp.alphas + '_', pp.alphanums + '_')
comment = pp.Regex(r';.*')

mnemonic = pp.MatchFirst([pp.CaselessKeyword(m) for m in MNEMONICS])
keyword = pp.MatchFirst(
    [pp.CaselessLiteral('[I]')] + [pp.CaselessKeyword(k) for k in KEYWORDS]
).setParseAction(lambda r: ('kw', r[0].upper()))

reg = pp.Regex(r'[Vv][0-9A-Fa-f](?![0-9A-Za-z_])').setParseAction(lambda r: ('reg', int(r[0][1], 16)))
number = pp.Regex(r'#[0-9A-Fa-f]+|0[xX][0-9A-Fa-f]+|%[01]+|[0-9]+') \
    .setParseAction(lambda r: ('num', parse_number(r[0])))
name = ~(mnemonic | keyword | reg) + id
ref = name.copy().setParseAction(lambda r: ('ref', r[0]))

operand = reg | keyword | number | ref
operands = pp.delimited_list(operand)

# Reserved label names are rejected in FPP.on_label
label = (id + pp.Suppress(':')).setParseAction(lambda r: (FPP.on_label, r[0]))

# CLS and RET take nothing, so a following label is not read as an operand
bare_cmd = (pp.CaselessKeyword('CLS') | pp.CaselessKeyword('RET')) \
    .setParseAction(lambda r: (FPP.on_instruction, [r[0].upper()]))
cmd = (mnemonic + operands).setParseAction(lambda r: (FPP.on_instruction, [r[0].upper()] + list(r[1:])))

db_cmd = (pp.Suppress(pp.CaselessKeyword('DB')) + pp.delimited_list(number)) \
    .setParseAction(lambda r: (FPP.on_db, list(r)))
dw_cmd = (pp.Suppress(pp.CaselessKeyword('DW')) + pp.delimited_list(number | ref)) \
    .setParseAction(lambda r: (FPP.on_dw, list(r)))

statement = label | db_cmd | dw_cmd | bare_cmd | cmd

program = pp.ZeroOrMore(statement) + pp.StringEnd()
program.ignore(comment)
