import logging as lg
import random
from collections import deque
from dataclasses import dataclass
from typing import Callable

import chipvm.common.ops as ops
from chipvm.common.disasm import disassemble
from chipvm.common.hwconf import (
    ADDRESS_MASK, FONT_BASE, GLYPH_SIZE, STACK_DEPTH, KEYS, FAULT_HISTORY
)
from chipvm.runtime.alu import OPERATIONS
from chipvm.runtime.state import MachineState


UNKNOWN_OPCODE = 'unknown-opcode'
STACK_OVERFLOW = 'stack-overflow'
STACK_UNDERFLOW = 'stack-underflow'
BAD_KEY = 'bad-key'


@dataclass(frozen=True)
class Fault:
    kind: str
    pc: int
    opcode: int
    message: str

    def __str__(self):
        return f'{self.kind} at {self.pc:03X} ({self.opcode:04X}): {self.message}'


class MachineFault(Exception):
    ''' Execution cannot continue; state is left as before the instruction '''

    def __init__(self, fault: Fault):
        super().__init__(str(fault))
        self.fault = fault


class StackOverflow(MachineFault):
    pass


class StackUnderflow(MachineFault):
    pass


@dataclass(frozen=True)
class Operands:
    opcode: int
    x: int      # Second nibble
    y: int      # Third nibble
    n: int      # Fourth nibble
    nn: int     # Low byte
    nnn: int    # Low 12 bits

    @classmethod
    def decode(cls, opcode: int) -> 'Operands':
        return cls(
            opcode=opcode,
            x=(opcode >> 8) & 0xF,
            y=(opcode >> 4) & 0xF,
            n=opcode & 0xF,
            nn=opcode & 0xFF,
            nnn=opcode & 0xFFF
        )


Handler = Callable[['CPU', Operands], None]


class CPU():
    state: MachineState
    faults: deque[Fault]
    key_wait: bool      # Fx0A is holding the instruction stream

    def __init__(
        self,
        state: MachineState,
        rng: random.Random | None = None,
        on_fault: Callable[[Fault], None] | None = None
    ):
        self.state = state      # Ref. to machine state
        self.rng = random.Random() if rng is None else rng
        self.on_fault = on_fault
        self.faults = deque(maxlen=FAULT_HISTORY)
        self.key_wait = False

    # - Helpers - #

    def report(self, kind: str, op: Operands, message: str) -> Fault:
        fault = Fault(kind, self.state.pc, op.opcode, message)
        lg.warning(str(fault))
        self.faults.append(fault)

        if self.on_fault is not None:
            self.on_fault(fault)

        return fault

    def skip_if(self, condition: bool):
        self.state.advance(2 if condition else 1)

    def key_pressed(self, op: Operands) -> bool:
        key = self.state.v[op.x]

        if key >= KEYS:
            self.report(BAD_KEY, op, f'V{op.x:X} holds {key:02X}, not a key')
            return False

        return self.state.keypad.is_pressed(key)

    # - Operations - #

    def cls(self, op: Operands):
        self.state.display.clear()
        self.state.draw_flag = True
        self.state.advance()

    def ret(self, op: Operands):
        s = self.state

        if s.sp == 0:
            raise StackUnderflow(self.report(STACK_UNDERFLOW, op, 'return with empty stack'))

        s.sp -= 1
        s.set_pc(s.stack[s.sp])
        s.advance()

    def jp(self, op: Operands):
        self.state.set_pc(op.nnn)

    def call(self, op: Operands):
        s = self.state

        if s.sp == STACK_DEPTH:
            raise StackOverflow(self.report(STACK_OVERFLOW, op, f'more than {STACK_DEPTH} nested calls'))

        s.stack[s.sp] = s.pc
        s.sp += 1
        s.set_pc(op.nnn)

    def se(self, op: Operands):
        self.skip_if(self.state.v[op.x] == op.nn)

    def sne(self, op: Operands):
        self.skip_if(self.state.v[op.x] != op.nn)

    def ser(self, op: Operands):
        self.skip_if(self.state.v[op.x] == self.state.v[op.y])

    def sner(self, op: Operands):
        self.skip_if(self.state.v[op.x] != self.state.v[op.y])

    def ld(self, op: Operands):
        self.state.set_v(op.x, op.nn)
        self.state.advance()

    def add(self, op: Operands):
        self.state.set_v(op.x, self.state.v[op.x] + op.nn)
        self.state.advance()

    def ldi(self, op: Operands):
        self.state.set_i(op.nnn)
        self.state.advance()

    def jpv0(self, op: Operands):
        self.state.set_pc(op.nnn + self.state.v[0])

    def rnd(self, op: Operands):
        self.state.set_v(op.x, self.rng.randrange(0x100) & op.nn)
        self.state.advance()

    def drw(self, op: Operands):
        s = self.state
        rows = s.read_block(s.i, op.n)
        collided = s.display.blit(s.v[op.x], s.v[op.y], rows)
        s.set_flag(collided)
        s.draw_flag = True
        s.advance()

    def skp(self, op: Operands):
        self.skip_if(self.key_pressed(op))

    def sknp(self, op: Operands):
        self.skip_if(not self.key_pressed(op))

    def gdt(self, op: Operands):
        self.state.set_v(op.x, self.state.timers.delay)
        self.state.advance()

    def wkey(self, op: Operands):
        keypad = self.state.keypad

        if not self.key_wait:
            # Only transitions after this point count
            keypad.clear_events()
            self.key_wait = True
            return

        key = keypad.pop_release()

        if key is None:
            return

        self.key_wait = False
        self.state.set_v(op.x, key)
        self.state.advance()

    def sdt(self, op: Operands):
        self.state.timers.delay = self.state.v[op.x]
        self.state.advance()

    def sst(self, op: Operands):
        self.state.timers.sound = self.state.v[op.x]
        self.state.advance()

    def addi(self, op: Operands):
        s = self.state
        total = s.i + s.v[op.x]
        s.set_i(total & ADDRESS_MASK)
        s.set_flag(total > ADDRESS_MASK)
        s.advance()

    def font(self, op: Operands):
        self.state.set_i(FONT_BASE + (self.state.v[op.x] & 0xF) * GLYPH_SIZE)
        self.state.advance()

    def bcd(self, op: Operands):
        s = self.state
        value = s.v[op.x]
        s.write(s.i, value // 100)
        s.write(s.i + 1, (value // 10) % 10)
        s.write(s.i + 2, value % 10)
        s.advance()

    def store(self, op: Operands):
        s = self.state
        s.write_block(s.i, bytes(s.v[:op.x + 1]))
        s.advance()

    def load(self, op: Operands):
        s = self.state

        for reg, value in enumerate(s.read_block(s.i, op.x + 1)):
            s.set_v(reg, value)

        s.advance()

    def alu(self, op: Operands):
        operation = OPERATIONS.get(op.n)

        if operation is None:
            self.unknown(op)
            return

        s = self.state
        result, flag = operation(s.v[op.x], s.v[op.y])
        s.set_v(op.x, result)

        if flag is not None:
            s.set_flag(flag)

        s.advance()

    def unknown(self, op: Operands):
        self.report(UNKNOWN_OPCODE, op, 'unrecognized instruction skipped')
        self.state.advance()

    # - Dispatch - #

    def sys(self, op: Operands):
        self.SYS_HANDLERS.get(op.opcode, CPU.unknown)(self, op)

    def key(self, op: Operands):
        self.KEY_HANDLERS.get(op.nn, CPU.unknown)(self, op)

    def misc(self, op: Operands):
        self.MISC_HANDLERS.get(op.nn, CPU.unknown)(self, op)

    def pair(self, op: Operands):
        if op.n != 0:
            self.unknown(op)
        elif op.opcode >> 12 == ops.SER:
            self.ser(op)
        else:
            self.sner(op)

    SYS_HANDLERS: dict[int, Handler] = {
        ops.CLS: cls,
        ops.RET: ret,
    }

    KEY_HANDLERS: dict[int, Handler] = {
        ops.SKP: skp,
        ops.SKNP: sknp,
    }

    MISC_HANDLERS: dict[int, Handler] = {
        ops.GDT: gdt,
        ops.WKEY: wkey,
        ops.SDT: sdt,
        ops.SST: sst,
        ops.ADDI: addi,
        ops.FONT: font,
        ops.BCD: bcd,
        ops.STR: store,
        ops.LDR: load,
    }

    HANDLERS: dict[int, Handler] = {
        ops.SYS: sys,
        ops.JP: jp,
        ops.CALL: call,
        ops.SE: se,
        ops.SNE: sne,
        ops.SER: pair,
        ops.LD: ld,
        ops.ADD: add,
        ops.ALU: alu,
        ops.SNER: pair,
        ops.LDI: ldi,
        ops.JPV0: jpv0,
        ops.RND: rnd,
        ops.DRW: drw,
        ops.KEY: key,
        ops.MISC: misc,
    }

    # -- Implementation -- #

    def step(self):
        opcode = self.state.fetch()
        op = Operands.decode(opcode)

        if not self.key_wait and lg.getLogger().isEnabledFor(lg.DEBUG):
            lg.debug(f'{self.state.pc:03X}: {opcode:04X} {disassemble(opcode)}')
            self.state.debug_dump()

        handler = self.HANDLERS[ops.family(opcode)]
        handler(self, op)
