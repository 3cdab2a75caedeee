class Chip8Error(Exception):
    """
    Base class for every session-fatal error raised by the emulator. The
    program counter and op-code, when known, are kept so that the host can
    report where the session stopped.
    """
    def __init__(self, message, op_code=None, program_counter=None):
        if op_code is not None and program_counter is not None:
            message = "{} (op-code {:04X} at {:03X})".format(message, op_code, program_counter)
        Exception.__init__(self, message)
        self.op_code = op_code
        self.program_counter = program_counter


class LoadError(Chip8Error):
    """
    A class to raise errors for programs that cannot be loaded.
    """


class UnknownOpcodeError(Chip8Error):
    """
    A class to raise unknown op code exceptions.
    """
    def __init__(self, op_code, program_counter=None):
        message = "Unknown op-code: {:04X}".format(op_code)
        if program_counter is not None:
            message += " at {:03X}".format(program_counter)
        Exception.__init__(self, message)
        self.op_code = op_code
        self.program_counter = program_counter


class StackOverflowError(Chip8Error):
    """
    Raised when a CALL would push past the configured stack depth.
    """


class StackUnderflowError(Chip8Error):
    """
    Raised when a RETURN is executed with an empty stack.
    """


class ProgramCounterError(Chip8Error):
    """
    Raised when the program counter runs past the end of memory.
    """


class ConfigurationError(Chip8Error):
    """
    Raised for host configuration values the emulator cannot use.
    """
