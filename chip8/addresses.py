# Bit masks used to pull the fields out of a 16-bit op-code.
#
#    Bits:  15-12     11-8      7-4       3-0
#           class      x         y         n
#                           |------ nn -------|
#                 |----------- nnn -----------|
OPERATION_MASK = 0xF000
X_MASK = 0x0F00
Y_MASK = 0x00F0
N_MASK = 0x000F
NN_MASK = 0x00FF
NNN_MASK = 0x0FFF

# Memory layout
MAX_MEMORY = 0x1000
ADDRESS_MASK = 0x0FFF
# Instructions are two bytes long and always start on an even address
INSTRUCTION_ADDRESS_MASK = 0x0FFE
FONT_START = 0x000
PROGRAM_COUNTER_START = 0x200
MAX_PROGRAM_SIZE = MAX_MEMORY - PROGRAM_COUNTER_START

# Register widths
BYTE_MASK = 0xFF
INDEX_MASK = 0xFFFF
FLAG_REGISTER = 0xF
NUM_REGISTERS = 0x10
NUM_KEYS = 0x10

# The default number of return addresses the stack can hold
STACK_DEPTH = 16

# The screen is 64 x 32 pixels, sprites are always 8 pixels wide
SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32
SPRITE_WIDTH = 8

# Timers and the redraw signal run at a fixed 60Hz
TIMER_HZ = 60
DEFAULT_CLOCK_HZ = 500
