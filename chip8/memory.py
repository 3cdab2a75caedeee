import logging

from chip8.addresses import ADDRESS_MASK, FONT_START, MAX_MEMORY, MAX_PROGRAM_SIZE, PROGRAM_COUNTER_START
from chip8.exception import LoadError

logger = logging.getLogger(__name__)

# The hexadecimal digit sprites built into the interpreter. Each glyph is
# 4 pixels wide and 5 rows tall, stored one row per byte.
FONT_SPRITES = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])

# Every font glyph is this many bytes long
FONT_GLYPH_SIZE = 5


class Memory(object):
    """
    The 4KB address space of the Chip 8. The low 512 bytes originally held
    the interpreter itself; here only the font sprites live there, starting
    at FONT_START. Programs are always loaded at PROGRAM_COUNTER_START.
    """
    def __init__(self):
        self.memory_bytes = bytearray(MAX_MEMORY)
        self.memory_bytes[FONT_START:FONT_START + len(FONT_SPRITES)] = FONT_SPRITES

    def load(self, program):
        """
        Replace the whole address space with the font table followed by
        the program. Everything past the program is zero-filled.

        :param program: the raw program bytes
        """
        program = bytes(program)
        if len(program) > MAX_PROGRAM_SIZE:
            raise LoadError(
                "Program is {} bytes, at most {} bytes fit in memory".format(
                    len(program), MAX_PROGRAM_SIZE))

        self.memory_bytes[:] = bytes(MAX_MEMORY)
        self.memory_bytes[FONT_START:FONT_START + len(FONT_SPRITES)] = FONT_SPRITES
        self.memory_bytes[PROGRAM_COUNTER_START:PROGRAM_COUNTER_START + len(program)] = program
        logger.debug("Loaded %d program bytes at %03X", len(program), PROGRAM_COUNTER_START)

    def read_byte(self, address):
        return self.memory_bytes[address]

    def write_byte(self, address, value):
        self.memory_bytes[address] = value

    def read_bytes(self, address, count):
        """
        Read count consecutive bytes. A read that runs past 0xFFF continues
        from address 0x000.
        """
        return bytes(self.memory_bytes[(address + offset) & ADDRESS_MASK] for offset in range(count))

    @staticmethod
    def font_address(digit):
        """
        Returns the address of the glyph for a hexadecimal digit.
        """
        return FONT_START + (digit & 0xF) * FONT_GLYPH_SIZE
