"""
Turns raw 16-bit op-codes into Instruction tuples.

Decoding is kept free of any CPU state so it can be tested on its own; the
CPU owns a single table mapping every Op to the routine that executes it.
The field names follow the usual Chip 8 notation:

   Bits:  15-12     11-8      7-4       3-0
          class      x         y         n

nn is the low byte and nnn the low 12 bits of the op-code.
"""
from collections import namedtuple
from enum import Enum

from chip8.addresses import N_MASK, NN_MASK, NNN_MASK, OPERATION_MASK, X_MASK, Y_MASK
from chip8.exception import UnknownOpcodeError


class Op(Enum):
    CLEAR = '00E0'
    RETURN = '00EE'
    SYS = '0nnn'
    JUMP = '1nnn'
    CALL = '2nnn'
    SKIP_EQ_IMM = '3xnn'
    SKIP_NE_IMM = '4xnn'
    SKIP_EQ_REG = '5xy0'
    LOAD_IMM = '6xnn'
    ADD_IMM = '7xnn'
    MOVE = '8xy0'
    OR = '8xy1'
    AND = '8xy2'
    XOR = '8xy3'
    ADD = '8xy4'
    SUB = '8xy5'
    SHIFT_RIGHT = '8xy6'
    SUBN = '8xy7'
    SHIFT_LEFT = '8xyE'
    SKIP_NE_REG = '9xy0'
    LOAD_INDEX = 'Annn'
    JUMP_OFFSET = 'Bnnn'
    RANDOM = 'Cxnn'
    DRAW = 'Dxyn'
    SKIP_KEY = 'Ex9E'
    SKIP_NO_KEY = 'ExA1'
    LOAD_DELAY = 'Fx07'
    WAIT_KEY = 'Fx0A'
    SET_DELAY = 'Fx15'
    SET_SOUND = 'Fx18'
    ADD_INDEX = 'Fx1E'
    LOAD_FONT = 'Fx29'
    BCD = 'Fx33'
    DUMP = 'Fx55'
    FILL = 'Fx65'


Instruction = namedtuple('Instruction', ['op', 'x', 'y', 'n', 'nn', 'nnn', 'op_code'])

# Op-code classes that map straight onto one operation
_CLASS_LOOKUP = {
    0x1: Op.JUMP,
    0x2: Op.CALL,
    0x3: Op.SKIP_EQ_IMM,
    0x4: Op.SKIP_NE_IMM,
    0x6: Op.LOAD_IMM,
    0x7: Op.ADD_IMM,
    0xA: Op.LOAD_INDEX,
    0xB: Op.JUMP_OFFSET,
    0xC: Op.RANDOM,
    0xD: Op.DRAW,
}

# 8xyn, selected by n
_LOGICAL_LOOKUP = {
    0x0: Op.MOVE,
    0x1: Op.OR,
    0x2: Op.AND,
    0x3: Op.XOR,
    0x4: Op.ADD,
    0x5: Op.SUB,
    0x6: Op.SHIFT_RIGHT,
    0x7: Op.SUBN,
    0xE: Op.SHIFT_LEFT,
}

# Exnn, selected by nn
_KEYBOARD_LOOKUP = {
    0x9E: Op.SKIP_KEY,
    0xA1: Op.SKIP_NO_KEY,
}

# Fxnn, selected by nn
_MISC_LOOKUP = {
    0x07: Op.LOAD_DELAY,
    0x0A: Op.WAIT_KEY,
    0x15: Op.SET_DELAY,
    0x18: Op.SET_SOUND,
    0x1E: Op.ADD_INDEX,
    0x29: Op.LOAD_FONT,
    0x33: Op.BCD,
    0x55: Op.DUMP,
    0x65: Op.FILL,
}


def _select_op(op_code, op_class, n, nn):
    if op_class in _CLASS_LOOKUP:
        return _CLASS_LOOKUP[op_class]
    if op_class == 0x0:
        if op_code == 0x00E0:
            return Op.CLEAR
        if op_code == 0x00EE:
            return Op.RETURN
        return Op.SYS
    if op_class == 0x5 and n == 0x0:
        return Op.SKIP_EQ_REG
    if op_class == 0x9 and n == 0x0:
        return Op.SKIP_NE_REG
    if op_class == 0x8:
        return _LOGICAL_LOOKUP.get(n)
    if op_class == 0xE:
        return _KEYBOARD_LOOKUP.get(nn)
    if op_class == 0xF:
        return _MISC_LOOKUP.get(nn)
    return None


def decode(op_code):
    """
    Decode a 16-bit op-code.

    :param op_code: the big-endian instruction word
    :return: the decoded Instruction
    :raises UnknownOpcodeError: if the word is not a Chip 8 instruction
    """
    op_class = (op_code & OPERATION_MASK) >> 12
    n = op_code & N_MASK
    nn = op_code & NN_MASK
    op = _select_op(op_code, op_class, n, nn)
    if op is None:
        raise UnknownOpcodeError(op_code)
    return Instruction(
        op=op,
        x=(op_code & X_MASK) >> 8,
        y=(op_code & Y_MASK) >> 4,
        n=n,
        nn=nn,
        nnn=op_code & NNN_MASK,
        op_code=op_code,
    )
