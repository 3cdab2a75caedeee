from chip8.clock import Scheduler
from chip8.config import Configuration, Quirks
from chip8.cpu import CPU
from chip8.decoder import Instruction, Op, decode
from chip8.display import DisplayBuffer
from chip8.exception import (
    Chip8Error, ConfigurationError, LoadError, ProgramCounterError, StackOverflowError, StackUnderflowError,
    UnknownOpcodeError
)
from chip8.keypad import Keypad
from chip8.memory import Memory

__version__ = '1.0.0'
