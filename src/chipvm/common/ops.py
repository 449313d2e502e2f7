# Families (top nibble)
SYS  = 0x0  # 0nnn, 00E0, 00EE
JP   = 0x1  # 1nnn: pc = nnn
CALL = 0x2  # 2nnn: push pc; pc = nnn
SE   = 0x3  # 3xnn: skip if Vx == nn
SNE  = 0x4  # 4xnn: skip if Vx != nn
SER  = 0x5  # 5xy0: skip if Vx == Vy
LD   = 0x6  # 6xnn: Vx = nn
ADD  = 0x7  # 7xnn: Vx += nn
ALU  = 0x8  # 8xyn
SNER = 0x9  # 9xy0: skip if Vx != Vy
LDI  = 0xA  # Annn: I = nnn
JPV0 = 0xB  # Bnnn: pc = nnn + V0
RND  = 0xC  # Cxnn: Vx = rand & nn
DRW  = 0xD  # Dxyn: draw n rows at (Vx, Vy)
KEY  = 0xE  # Ex9E, ExA1
MISC = 0xF  # Fxnn

# SYS family (low byte)
CLS = 0xE0  # 00E0
RET = 0xEE  # 00EE

# ALU family (low nibble)
MOV  = 0x0  # 8xy0: Vx = Vy
OR   = 0x1  # 8xy1: Vx |= Vy
AND  = 0x2  # 8xy2: Vx &= Vy
XOR  = 0x3  # 8xy3: Vx ^= Vy
ADDC = 0x4  # 8xy4: Vx += Vy, VF = carry
SUB  = 0x5  # 8xy5: Vx -= Vy, VF = not borrow
SHR  = 0x6  # 8xy6: Vx >>= 1, VF = lsb
SUBN = 0x7  # 8xy7: Vx = Vy - Vx, VF = not borrow
SHL  = 0xE  # 8xyE: Vx <<= 1, VF = msb

# KEY family (low byte)
SKP  = 0x9E  # Ex9E: skip if key Vx down
SKNP = 0xA1  # ExA1: skip if key Vx up

# MISC family (low byte)
GDT  = 0x07  # Fx07: Vx = DT
WKEY = 0x0A  # Fx0A: Vx = next key
SDT  = 0x15  # Fx15: DT = Vx
SST  = 0x18  # Fx18: ST = Vx
ADDI = 0x1E  # Fx1E: I += Vx, VF = overflow
FONT = 0x29  # Fx29: I = glyph address of Vx
BCD  = 0x33  # Fx33: M[I..I+2] = BCD(Vx)
STR  = 0x55  # Fx55: M[I..I+x] = V0..Vx
LDR  = 0x65  # Fx65: V0..Vx = M[I..I+x]


def family(opcode: int) -> int:
    return (opcode >> 12) & 0xF
