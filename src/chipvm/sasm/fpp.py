import logging as lg
from typing import List, Tuple, Dict, Any

from chipvm.common.hwconf import ROM_BASE, INSTRUCTION_SIZE

Tokens = List[Any]
Operand = Tuple[str, Any]

# (mnemonic, operand signature) -> (template, slot per operand)
# Signature kinds: V register, N number or label, or a keyword
FORMS: Dict[Tuple[str, Tuple[str, ...]], Tuple[int, Tuple[str | None, ...]]] = {
    ('CLS', ()): (0x00E0, ()),
    ('RET', ()): (0x00EE, ()),
    ('SYS', ('N',)): (0x0000, ('nnn',)),
    ('JP', ('N',)): (0x1000, ('nnn',)),
    ('JP', ('V', 'N')): (0xB000, ('v0', 'nnn')),
    ('CALL', ('N',)): (0x2000, ('nnn',)),
    ('SE', ('V', 'N')): (0x3000, ('x', 'nn')),
    ('SE', ('V', 'V')): (0x5000, ('x', 'y')),
    ('SNE', ('V', 'N')): (0x4000, ('x', 'nn')),
    ('SNE', ('V', 'V')): (0x9000, ('x', 'y')),
    ('LD', ('V', 'N')): (0x6000, ('x', 'nn')),
    ('LD', ('V', 'V')): (0x8000, ('x', 'y')),
    ('LD', ('I', 'N')): (0xA000, (None, 'nnn')),
    ('LD', ('V', 'DT')): (0xF007, ('x', None)),
    ('LD', ('V', 'K')): (0xF00A, ('x', None)),
    ('LD', ('DT', 'V')): (0xF015, (None, 'x')),
    ('LD', ('ST', 'V')): (0xF018, (None, 'x')),
    ('LD', ('F', 'V')): (0xF029, (None, 'x')),
    ('LD', ('B', 'V')): (0xF033, (None, 'x')),
    ('LD', ('[I]', 'V')): (0xF055, (None, 'x')),
    ('LD', ('V', '[I]')): (0xF065, ('x', None)),
    ('ADD', ('V', 'N')): (0x7000, ('x', 'nn')),
    ('ADD', ('V', 'V')): (0x8004, ('x', 'y')),
    ('ADD', ('I', 'V')): (0xF01E, (None, 'x')),
    ('OR', ('V', 'V')): (0x8001, ('x', 'y')),
    ('AND', ('V', 'V')): (0x8002, ('x', 'y')),
    ('XOR', ('V', 'V')): (0x8003, ('x', 'y')),
    ('SUB', ('V', 'V')): (0x8005, ('x', 'y')),
    ('SHR', ('V',)): (0x8006, ('x',)),
    ('SHR', ('V', 'V')): (0x8006, ('x', 'y')),
    ('SUBN', ('V', 'V')): (0x8007, ('x', 'y')),
    ('SHL', ('V',)): (0x800E, ('x',)),
    ('SHL', ('V', 'V')): (0x800E, ('x', 'y')),
    ('RND', ('V', 'N')): (0xC000, ('x', 'nn')),
    ('DRW', ('V', 'V', 'N')): (0xD000, ('x', 'y', 'n')),
    ('SKP', ('V',)): (0xE09E, ('x',)),
    ('SKNP', ('V',)): (0xE0A1, ('x',)),
}

# slot -> (shift, max value)
SLOTS = {
    'x': (8, 0xF),
    'y': (4, 0xF),
    'n': (0, 0xF),
    'nn': (0, 0xFF),
    'nnn': (0, 0xFFF),
}


# Words that cannot name a label
RESERVED = {m for (m, _) in FORMS} | {'I', 'DT', 'ST', 'K', 'F', 'B', 'DB', 'DW'} | {f'V{r:X}' for r in range(16)}


class AsmError(Exception):
    pass


def signature_kind(operand: Operand) -> str:
    kind, value = operand

    if kind == 'reg':
        return 'V'

    if kind == 'kw':
        return value

    return 'N'


class FPP:
    ''' First pass processor '''
    cmd_list: List[Tuple[str, bytes | Tuple[int, str, int, int]]]
    label_dict: Dict[str, int]

    def __init__(self, origin: int = ROM_BASE):
        self.cmd_list = list()
        self.origin = origin
        self.offset = 0
        self.label_dict = dict()

    def address(self) -> int:
        return self.origin + self.offset

    # Emitters
    def issue_bytes(self, bytestr: bytes):
        self.cmd_list.append(('bytes', bytestr))
        self.offset += len(bytestr)

    def issue_word(self, word: int):
        lg.debug(f'Issuing 0x{word:04X} @ 0x{self.address():03X}')
        self.issue_bytes(word.to_bytes(2, 'big'))

    def issue_ref(self, labelname: str, template: int, width: int = INSTRUCTION_SIZE):
        lg.debug(f'Ref {labelname} @ 0x{self.address():03X}')
        self.cmd_list.append(('ref', (self.offset, labelname, template, width)))
        self.offset += width  # placeholder-bytes

    # Handlers
    def on_label(self, labelname: str):
        if labelname.upper() in RESERVED:
            raise AsmError(f'Label {labelname} is a reserved word')

        if labelname in self.label_dict:
            raise AsmError(f'Duplicate label {labelname}')

        self.label_dict[labelname] = self.address()
        lg.debug(f'Label {labelname} @ 0x{self.address():03X}')

    def on_db(self, values: Tokens):
        data = bytearray()

        for (_, value) in values:
            if not 0 <= value <= 0xFF:
                raise AsmError(f'DB value {value} does not fit a byte')

            data.append(value)

        self.issue_bytes(bytes(data))

    def on_dw(self, values: Tokens):
        for (kind, value) in values:
            if kind == 'ref':
                self.issue_ref(value, 0x0000)
            elif 0 <= value <= 0xFFFF:
                self.issue_word(value)
            else:
                raise AsmError(f'DW value {value} does not fit a word')

    def on_instruction(self, tokens: Tokens):
        mnemonic = tokens[0]
        operands: List[Operand] = tokens[1:]
        signature = tuple(signature_kind(o) for o in operands)
        form = FORMS.get((mnemonic, signature))

        if form is None:
            raise AsmError(f'No form of {mnemonic} takes ({", ".join(signature)})')

        template, slots = form
        word = template
        labelname = None

        for slot, (kind, value) in zip(slots, operands):
            if slot is None:
                continue

            if slot == 'v0':
                if value != 0:
                    raise AsmError(f'{mnemonic} with offset only accepts V0')
                continue

            if kind == 'ref':
                if slot != 'nnn':
                    raise AsmError(f'Label {value} used where a {slot} constant is expected')
                labelname = value
                continue

            shift, limit = SLOTS[slot]

            if not 0 <= value <= limit:
                raise AsmError(f'{mnemonic}: {value} does not fit {slot}')

            word |= value << shift

        if labelname is None:
            self.issue_word(word)
        else:
            self.issue_ref(labelname, word)
