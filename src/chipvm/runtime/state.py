import logging as lg

from chipvm.common.hwconf import (
    MEMORY_SIZE, ADDRESS_MASK, ROM_BASE, FONT_BASE, REGISTERS, STACK_DEPTH, FLAG_REGISTER
)
from chipvm.common.font import FONT
from chipvm.runtime.display import Display
from chipvm.runtime.timers import Timers
from chipvm.runtime.keypad import Keypad


class MachineState:
    memory: bytearray
    v: list[int]        # V0..VF
    i: int              # Index register
    pc: int             # Program counter
    stack: list[int]    # Return addresses
    sp: int             # Stack pointer, 0..STACK_DEPTH
    draw_flag: bool     # Display changed since last render

    def __init__(self):
        self.memory = bytearray(MEMORY_SIZE)
        self.v = [0] * REGISTERS
        self.i = 0
        self.pc = ROM_BASE
        self.stack = [0] * STACK_DEPTH
        self.sp = 0
        self.draw_flag = False

        self.display = Display()
        self.timers = Timers()
        self.keypad = Keypad()

    # - Registers - #

    def set_v(self, reg: int, value: int):
        self.v[reg] = value & 0xFF

    def set_flag(self, value: bool | int):
        self.v[FLAG_REGISTER] = 1 if value else 0

    def set_i(self, value: int):
        self.i = value & 0xFFFF

    def set_pc(self, value: int):
        self.pc = value & ADDRESS_MASK

    def advance(self, count: int = 1):
        self.set_pc(self.pc + 2 * count)

    # - Memory - #

    def read(self, addr: int) -> int:
        return self.memory[addr & ADDRESS_MASK]

    def write(self, addr: int, value: int):
        self.memory[addr & ADDRESS_MASK] = value & 0xFF

    def read_block(self, addr: int, count: int) -> bytes:
        return bytes(self.read(addr + k) for k in range(count))

    def write_block(self, addr: int, data: bytes):
        for k, value in enumerate(data):
            self.write(addr + k, value)

    def fetch(self) -> int:
        return self.read(self.pc) << 8 | self.read(self.pc + 1)

    def load_font(self):
        self.write_block(FONT_BASE, FONT)

    # - Host side - #

    def consume_draw(self) -> bool:
        flag = self.draw_flag
        self.draw_flag = False
        return flag

    def debug_dump(self):
        state = [f'{k}:{v:X}' for k, v in {
            'PC': self.pc,
            'I': self.i,
            'SP': self.sp,
            'DT': self.timers.delay,
            'ST': self.timers.sound
        }.items()]

        state.extend([f'V{r:X}:{self.v[r]:02X}' for r in range(REGISTERS)])

        lg.debug(' '.join(state))
