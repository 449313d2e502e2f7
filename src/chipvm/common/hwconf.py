MEMORY_SIZE      = 0x1000
ADDRESS_MASK     = MEMORY_SIZE - 1
FONT_BASE        = 0x000               # Glyphs for 0-F, 5 bytes each
GLYPH_SIZE       = 5
ROM_BASE         = 0x200               # Programs are loaded here
ROM_MAX_SIZE     = MEMORY_SIZE - ROM_BASE

INSTRUCTION_SIZE = 2
REGISTERS        = 16
FLAG_REGISTER    = 0xF
STACK_DEPTH      = 16

DISPLAY_WIDTH    = 64
DISPLAY_HEIGHT   = 32
SPRITE_WIDTH     = 8

KEYS             = 16

TIMER_HZ         = 60
TIMER_PERIOD_MS  = 16                  # ~60Hz, as the host measures it

FAULT_HISTORY    = 256                 # Faults kept by the CPU for inspection
