import logging
import random

from chip8.addresses import (
    ADDRESS_MASK, BYTE_MASK, FLAG_REGISTER, INDEX_MASK, INSTRUCTION_ADDRESS_MASK, MAX_MEMORY, NUM_REGISTERS,
    PROGRAM_COUNTER_START, STACK_DEPTH
)
from chip8.config import Quirks
from chip8.decoder import Op, decode
from chip8.display import DisplayBuffer
from chip8.exception import (
    ProgramCounterError, StackOverflowError, StackUnderflowError, UnknownOpcodeError
)
from chip8.keypad import Keypad
from chip8.memory import Memory

logger = logging.getLogger(__name__)

# C L A S S E S ###############################################################


class CPU(object):
    """
    A class to emulate a Chip 8 CPU. There are several good resources out on
    the web that describe the internals of the Chip 8 CPU. For example:

        http://devernay.free.fr/hacks/chip8/C8TECH10.HTM
        http://michael.toren.net/mirrors/chip8/chip8def.htm

    To summarize these sources, the Chip 8 has:

        * 16 x 8-bit general purpose registers (V0 - VF**)
        * 1 x 16-bit index register (I)
        * 1 x 16-bit program counter (PC)
        * 1 x 8-bit delay timer (DT)
        * 1 x 8-bit sound timer (ST)
        * a call stack of return addresses (16 deep by default)

    ** VF is a special register - it is used to store the overflow bit

    The CPU owns its memory, display buffer and keypad state. Only the
    thread running cycle() may mutate them; renderers and input layers go
    through the lock-guarded DisplayBuffer and Keypad.
    """
    def __init__(self, display=None, keypad=None, quirks=None, stack_depth=STACK_DEPTH, rng=None):
        """
        Initialize the Chip8 CPU.

        :param display: the DisplayBuffer to draw on (a new one by default)
        :param keypad: the Keypad to read keys from (a new one by default)
        :param quirks: the Quirks to run with (original hardware by default)
        :param stack_depth: the number of return addresses the stack holds
        :param rng: the random.Random used by Cxnn
        """
        # There are two timer registers, one for sound and one that is general
        # purpose known as the delay timer. The timers are loaded with a value
        # and then decremented 60 times per second.
        self.cpu_timers = {
            'delay': 0,
            'sound': 0,
        }

        # Defines the general purpose, index, stack pointer and program
        # counter registers.
        self.cpu_registers = {
            'v': [],
            'index': 0,
            'sp': 0,
            'pc': 0,
        }

        # Every decoded operation maps onto exactly one routine below
        self.cpu_operation_lookup = {
            Op.CLEAR: self.clear_screen,                       # 00E0 - CLS
            Op.RETURN: self.return_from_subroutine,            # 00EE - RTS
            Op.SYS: self.call_machine_code,                    # 0nnn - SYS  nnn
            Op.JUMP: self.jump_to_address,                     # 1nnn - JUMP nnn
            Op.CALL: self.jump_to_subroutine,                  # 2nnn - CALL nnn
            Op.SKIP_EQ_IMM: self.skip_if_reg_equal_val,        # 3snn - SKE  Vs, nn
            Op.SKIP_NE_IMM: self.skip_if_reg_not_equal_val,    # 4snn - SKNE Vs, nn
            Op.SKIP_EQ_REG: self.skip_if_reg_equal_reg,        # 5st0 - SKE  Vs, Vt
            Op.LOAD_IMM: self.move_value_to_reg,               # 6snn - LOAD Vs, nn
            Op.ADD_IMM: self.add_value_to_reg,                 # 7snn - ADD  Vs, nn
            Op.MOVE: self.move_reg_into_reg,                   # 8st0 - LOAD Vs, Vt
            Op.OR: self.logical_or,                            # 8st1 - OR   Vs, Vt
            Op.AND: self.logical_and,                          # 8st2 - AND  Vs, Vt
            Op.XOR: self.exclusive_or,                         # 8st3 - XOR  Vs, Vt
            Op.ADD: self.add_reg_to_reg,                       # 8st4 - ADD  Vs, Vt
            Op.SUB: self.subtract_reg_from_reg,                # 8st5 - SUB  Vs, Vt
            Op.SHIFT_RIGHT: self.right_shift_reg,              # 8st6 - SHR  Vs, Vt
            Op.SUBN: self.subtract_reg_from_reg1,              # 8st7 - SUBN Vs, Vt
            Op.SHIFT_LEFT: self.left_shift_reg,                # 8stE - SHL  Vs, Vt
            Op.SKIP_NE_REG: self.skip_if_reg_not_equal_reg,    # 9st0 - SKNE Vs, Vt
            Op.LOAD_INDEX: self.load_index_reg_with_value,     # Annn - LOAD I, nnn
            Op.JUMP_OFFSET: self.jump_to_v0_plus_value,        # Bnnn - JUMP [V0] + nnn
            Op.RANDOM: self.generate_random_number,            # Ctnn - RAND Vt, nn
            Op.DRAW: self.draw_sprite,                         # Dstn - DRAW Vs, Vt, n
            Op.SKIP_KEY: self.skip_if_key_pressed,             # Es9E - SKPR Vs
            Op.SKIP_NO_KEY: self.skip_if_key_not_pressed,      # EsA1 - SKUP Vs
            Op.LOAD_DELAY: self.move_delay_timer_into_reg,     # Ft07 - LOAD Vt, DELAY
            Op.WAIT_KEY: self.wait_for_keypress,               # Ft0A - KEYD Vt
            Op.SET_DELAY: self.move_reg_into_delay_timer,      # Fs15 - LOAD DELAY, Vs
            Op.SET_SOUND: self.move_reg_into_sound_timer,      # Fs18 - LOAD SOUND, Vs
            Op.ADD_INDEX: self.add_reg_into_index,             # Fs1E - ADD  I, Vs
            Op.LOAD_FONT: self.load_index_with_reg_sprite,     # Fs29 - LOAD I, Vs
            Op.BCD: self.store_bcd_in_memory,                  # Fs33 - BCD
            Op.DUMP: self.store_regs_in_memory,                # Fs55 - STOR [I], Vs
            Op.FILL: self.read_regs_from_memory,               # Fs65 - LOAD Vs, [I]
        }
        missing = set(Op) - set(self.cpu_operation_lookup)
        if missing:
            raise RuntimeError("No routine for {}".format(sorted(op.name for op in missing)))

        self.cpu_quirks = quirks if quirks is not None else Quirks()
        self.cpu_stack_depth = stack_depth
        self.cpu_random = rng if rng is not None else random.Random()
        self.cpu_memory = Memory()
        self.cpu_display = display if display is not None else DisplayBuffer()
        self.cpu_keypad = keypad if keypad is not None else Keypad()
        self.cpu_stack = []
        self.cpu_operand = 0
        self.cpu_instruction_address = PROGRAM_COUNTER_START
        self.cpu_waiting_register = None
        self.reset()

    def __str__(self):
        val = 'PC: {:4X}  OP: {:4X}\n'.format(self.cpu_instruction_address, self.cpu_operand)
        for index in range(NUM_REGISTERS):
            val += 'V{:X}: {:2X}\n'.format(index, self.cpu_registers['v'][index])
        val += 'I: {:4X}\n'.format(self.cpu_registers['index'])
        val += 'SP: {:d}  DT: {:d}  ST: {:d}\n'.format(
            self.cpu_registers['sp'], self.cpu_timers['delay'], self.cpu_timers['sound'])
        return val

    @property
    def awaiting_key(self):
        """
        True while an Fx0A instruction is holding the program counter.
        """
        return self.cpu_waiting_register is not None

    @property
    def sound_active(self):
        return self.cpu_timers['sound'] > 0

    def load(self, program):
        """
        Start a fresh session with the given program: memory is rebuilt,
        every register, timer and the stack are cleared, the program counter
        points at the first program byte and the screen is blanked.

        :param program: the raw program bytes
        """
        self.cpu_memory.load(program)
        self.reset()
        self.cpu_display.clear()

    def reset(self):
        """
        Reset the CPU by blanking out all registers, emptying the stack and
        pointing the program counter at the start of the program.
        """
        self.cpu_registers['v'] = [0] * NUM_REGISTERS
        self.cpu_registers['pc'] = PROGRAM_COUNTER_START
        self.cpu_registers['sp'] = 0
        self.cpu_registers['index'] = 0
        self.cpu_timers['delay'] = 0
        self.cpu_timers['sound'] = 0
        del self.cpu_stack[:]
        self.cpu_operand = 0
        self.cpu_instruction_address = PROGRAM_COUNTER_START
        self.cpu_waiting_register = None
        self.cpu_keypad.forget_presses()

    def timer_tick(self):
        """
        Decrement both the sound and delay timer. Called at 60Hz.
        """
        if self.cpu_timers['delay'] != 0:
            self.cpu_timers['delay'] -= 1

        if self.cpu_timers['sound'] != 0:
            self.cpu_timers['sound'] -= 1

    def cycle(self):
        """
        Run one instruction cycle: fetch the op-code at the program counter,
        move the program counter past it, decode and execute it. While the
        CPU is waiting for a key the cycle only checks the keypad.

        :return: the executed Instruction, or None if waiting for a key
        """
        if self.cpu_waiting_register is not None:
            self.poll_keypress()
            return None

        program_counter = self.cpu_registers['pc']
        if program_counter > MAX_MEMORY - 2:
            raise ProgramCounterError(
                "Program counter {:X} is past the end of memory".format(program_counter))

        self.cpu_instruction_address = program_counter
        self.cpu_operand = self.cpu_memory.read_byte(program_counter) << 8
        self.cpu_operand |= self.cpu_memory.read_byte(program_counter + 1)
        self.cpu_registers['pc'] = program_counter + 2

        try:
            instruction = decode(self.cpu_operand)
        except UnknownOpcodeError:
            raise UnknownOpcodeError(self.cpu_operand, program_counter) from None
        self.execute(instruction)
        return instruction

    def execute(self, instruction):
        """
        Execute an already decoded instruction. The program counter is
        expected to point past it already.
        """
        self.cpu_operation_lookup[instruction.op](instruction)

    def skip_next(self):
        self.cpu_registers['pc'] += 2

    def clear_screen(self, instruction):
        """
        00E0 - CLS

        Turns off every pixel on the display.
        """
        self.cpu_display.clear()

    def return_from_subroutine(self, instruction):
        """
        00EE - RTS

        Pop the return address pushed by the matching CALL into the
        program counter.
        """
        if not self.cpu_stack:
            raise StackUnderflowError(
                "Return with an empty stack", instruction.op_code, self.cpu_instruction_address)
        self.cpu_registers['pc'] = self.cpu_stack.pop()
        self.cpu_registers['sp'] = len(self.cpu_stack)

    def call_machine_code(self, instruction):
        """
        0nnn - SYS nnn

        Jump to a machine code routine of the host computer. Interpreters
        other than the original have always ignored this.
        """
        logger.debug("Ignoring SYS %03X at %03X", instruction.nnn, self.cpu_instruction_address)

    def jump_to_address(self, instruction):
        """
        1nnn - JUMP nnn

        Jump to address. The address to jump to is calculated using the bits
        taken from the operand as follows:

           Bits:  15-12    11-8      7-4      3-0
                  unused  address  address  address

        An odd address is rounded down to the instruction boundary below it.
        """
        self.cpu_registers['pc'] = instruction.nnn & INSTRUCTION_ADDRESS_MASK

    def jump_to_subroutine(self, instruction):
        """
        2nnn - CALL nnn

        Jump to subroutine. Save the current program counter (already
        pointing at the instruction after the CALL) on the stack. The
        subroutine to jump to is taken from the operand as follows:

           Bits:  15-12    11-8      7-4      3-0
                  unused  address  address  address

        Calling with a full stack leaves the stack untouched and raises
        StackOverflowError.
        """
        if len(self.cpu_stack) >= self.cpu_stack_depth:
            raise StackOverflowError(
                "Stack overflow, depth is {}".format(self.cpu_stack_depth),
                instruction.op_code, self.cpu_instruction_address)
        self.cpu_stack.append(self.cpu_registers['pc'])
        self.cpu_registers['sp'] = len(self.cpu_stack)
        self.cpu_registers['pc'] = instruction.nnn & INSTRUCTION_ADDRESS_MASK

    def skip_if_reg_equal_val(self, instruction):
        """
        3snn - SKE Vs, nn

        Skip if register contents equal to constant value. The calculation for
        the register and constant is performed on the operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   source  constant  constant

        The program counter is updated to skip the next instruction by
        advancing it by 2 bytes.
        """
        if self.cpu_registers['v'][instruction.x] == instruction.nn:
            self.skip_next()

    def skip_if_reg_not_equal_val(self, instruction):
        """
        4snn - SKNE Vs, nn

        Skip if register contents not equal to constant value.
        """
        if self.cpu_registers['v'][instruction.x] != instruction.nn:
            self.skip_next()

    def skip_if_reg_equal_reg(self, instruction):
        """
        5st0 - SKE Vs, Vt

        Skip if source register is equal to target register. The calculation
        for the registers to use is performed on the operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   source    target      0
        """
        if self.cpu_registers['v'][instruction.x] == self.cpu_registers['v'][instruction.y]:
            self.skip_next()

    def move_value_to_reg(self, instruction):
        """
        6snn - LOAD Vs, nn

        Move the constant value into the specified register.
        """
        self.cpu_registers['v'][instruction.x] = instruction.nn

    def add_value_to_reg(self, instruction):
        """
        7snn - ADD Vs, nn

        Add the constant value to the specified register. The carry is
        discarded and VF is left alone.
        """
        temp = self.cpu_registers['v'][instruction.x] + instruction.nn
        self.cpu_registers['v'][instruction.x] = temp & BYTE_MASK

    def move_reg_into_reg(self, instruction):
        """
        8st0 - LOAD Vs, Vt

        Move the value of the source register into the value of the target
        register. The calculation for the registers is performed on the
        operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   target    source      0
        """
        self.cpu_registers['v'][instruction.x] = self.cpu_registers['v'][instruction.y]

    def logical_or(self, instruction):
        """
        8ts1 - OR   Vs, Vt

        Perform a logical OR operation between the source and the target
        register, and store the result in the target register.
        """
        self.cpu_registers['v'][instruction.x] |= self.cpu_registers['v'][instruction.y]
        self._reset_flag_after_logic()

    def logical_and(self, instruction):
        """
        8ts2 - AND  Vs, Vt
        """
        self.cpu_registers['v'][instruction.x] &= self.cpu_registers['v'][instruction.y]
        self._reset_flag_after_logic()

    def exclusive_or(self, instruction):
        """
        8ts3 - XOR  Vs, Vt
        """
        self.cpu_registers['v'][instruction.x] ^= self.cpu_registers['v'][instruction.y]
        self._reset_flag_after_logic()

    def _reset_flag_after_logic(self):
        if self.cpu_quirks.reset_vf_on_logic:
            self.cpu_registers['v'][FLAG_REGISTER] = 0

    def add_reg_to_reg(self, instruction):
        """
        8ts4 - ADD  Vt, Vs

        Add the value in the source register to the value in the target
        register, and store the result in the target register. The register
        calculations are as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused   target    source      4

        If a carry is generated, set a carry flag in register VF. The flag is
        written after the sum, so it wins when the target is VF.
        """
        temp = self.cpu_registers['v'][instruction.x] + self.cpu_registers['v'][instruction.y]
        self.cpu_registers['v'][instruction.x] = temp & BYTE_MASK
        self.cpu_registers['v'][FLAG_REGISTER] = 1 if temp > BYTE_MASK else 0

    def subtract_reg_from_reg(self, instruction):
        """
        8ts5 - SUB  Vt, Vs

        Subtract the value in the source register from the value in the
        target register, and store the result in the target register.

        If a borrow is NOT generated, set a carry flag in register VF.
        """
        target_reg = self.cpu_registers['v'][instruction.x]
        source_reg = self.cpu_registers['v'][instruction.y]
        self.cpu_registers['v'][instruction.x] = (target_reg - source_reg) & BYTE_MASK
        self.cpu_registers['v'][FLAG_REGISTER] = 1 if target_reg >= source_reg else 0

    def right_shift_reg(self, instruction):
        """
        8ts6 - SHR  Vt, Vs

        Shift the bits 1 bit to the right and store them in the target
        register. Bit 0 will be shifted into register VF. The original
        interpreter shifts the source register; with the shift_in_place
        quirk the target register is shifted instead.
        """
        value = self._shift_source(instruction)
        self.cpu_registers['v'][instruction.x] = value >> 1
        self.cpu_registers['v'][FLAG_REGISTER] = value & 0x1

    def subtract_reg_from_reg1(self, instruction):
        """
        8ts7 - SUBN Vt, Vs

        Subtract the value in the target register from the value in the
        source register, and store the result in the target register.

        If a borrow is NOT generated, set a carry flag in register VF.
        """
        target_reg = self.cpu_registers['v'][instruction.x]
        source_reg = self.cpu_registers['v'][instruction.y]
        self.cpu_registers['v'][instruction.x] = (source_reg - target_reg) & BYTE_MASK
        self.cpu_registers['v'][FLAG_REGISTER] = 1 if source_reg >= target_reg else 0

    def left_shift_reg(self, instruction):
        """
        8tsE - SHL  Vt, Vs

        Shift the bits 1 bit to the left and store them in the target
        register. Bit 7 will be shifted into register VF.
        """
        value = self._shift_source(instruction)
        self.cpu_registers['v'][instruction.x] = (value << 1) & BYTE_MASK
        self.cpu_registers['v'][FLAG_REGISTER] = (value & 0x80) >> 7

    def _shift_source(self, instruction):
        if self.cpu_quirks.shift_in_place:
            return self.cpu_registers['v'][instruction.x]
        return self.cpu_registers['v'][instruction.y]

    def skip_if_reg_not_equal_reg(self, instruction):
        """
        9st0 - SKNE Vs, Vt

        Skip if source register is not equal to target register.
        """
        if self.cpu_registers['v'][instruction.x] != self.cpu_registers['v'][instruction.y]:
            self.skip_next()

    def load_index_reg_with_value(self, instruction):
        """
        Annn - LOAD I, nnn

        Load index register with constant value.
        """
        self.cpu_registers['index'] = instruction.nnn

    def jump_to_v0_plus_value(self, instruction):
        """
        Bnnn - JUMP [V0] + nnn

        Load the program counter with nnn plus the value of register V0,
        wrapped to the 12-bit address space and rounded down to an even
        address. The address calculation is based on the operand, masked as
        follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused   address  address  address
        """
        self.cpu_registers['pc'] = (self.cpu_registers['v'][0x0] + instruction.nnn) & INSTRUCTION_ADDRESS_MASK

    def generate_random_number(self, instruction):
        """
        Ctnn - RAND Vt, nn

        A random number between 0 and 255 is generated. The contents of it are
        then ANDed with the constant value passed in the operand. The result is
        stored in the target register.
        """
        self.cpu_registers['v'][instruction.x] = instruction.nn & self.cpu_random.randint(0, 255)

    def draw_sprite(self, instruction):
        """
        Dxyn - DRAW x, y, num_bytes

        Draws the sprite pointed to in the index register at the specified
        x and y coordinates. Drawing is done via an XOR routine, meaning that
        if the target pixel is already turned on, and a pixel is set to be
        turned on at that same location via the draw, then the pixel is turned
        off. Each sprite is 8 bits (1 byte) wide. The num_bytes parameter sets
        how tall the sprite is. Consecutive bytes in the memory pointed to by
        the index register make up the bytes of the sprite. Each bit in the
        sprite byte determines whether a pixel is turned on (1) or turned off
        (0). For example, assume that the index register pointed to the
        following 7 bytes:

                       bit 0 1 2 3 4 5 6 7

           byte 0          0 1 1 1 1 1 0 0
           byte 1          0 1 0 0 0 0 0 0
           byte 2          0 1 0 0 0 0 0 0
           byte 3          0 1 1 1 1 1 0 0
           byte 4          0 1 0 0 0 0 0 0
           byte 5          0 1 0 0 0 0 0 0
           byte 6          0 1 1 1 1 1 0 0

        This would draw a character on the screen that looks like an 'E'. The
        starting coordinates wrap around the screen; pixels that run off the
        edge are clipped unless the wrap_sprites quirk is set. If drawing
        turns any pixel off, VF will be set to 1, otherwise to 0.

           Bits:  15-12     11-8      7-4       3-0
                  unused    x_source  y_source  num_bytes
        """
        index = self.cpu_registers['index']
        sprite_rows = self.cpu_memory.read_bytes(index & ADDRESS_MASK, instruction.n)
        collision = self.cpu_display.draw_sprite(
            self.cpu_registers['v'][instruction.x],
            self.cpu_registers['v'][instruction.y],
            sprite_rows,
            wrap=self.cpu_quirks.wrap_sprites)
        self.cpu_registers['v'][FLAG_REGISTER] = 1 if collision else 0

    def skip_if_key_pressed(self, instruction):
        """
        Es9E - SKPR Vs

        Skip the next instruction if the key named by the low nibble of the
        source register is held down.
        """
        if self.cpu_keypad.is_pressed(self.cpu_registers['v'][instruction.x]):
            self.skip_next()

    def skip_if_key_not_pressed(self, instruction):
        """
        EsA1 - SKUP Vs

        Skip the next instruction if the key named by the low nibble of the
        source register is NOT held down.
        """
        if not self.cpu_keypad.is_pressed(self.cpu_registers['v'][instruction.x]):
            self.skip_next()

    def move_delay_timer_into_reg(self, instruction):
        """
        Ft07 - LOAD Vt, DELAY

        Move the value of the delay timer into the target register.
        """
        self.cpu_registers['v'][instruction.x] = self.cpu_timers['delay']

    def wait_for_keypress(self, instruction):
        """
        Ft0A - KEYD Vt

        Stop execution until a key is pressed. Move the value of the key
        pressed into the specified register.

        Nothing blocks here: the program counter is moved back onto this
        instruction and the CPU is flagged as waiting. Following cycles only
        poll the keypad (timers keep running) until a key goes down.
        """
        self.cpu_registers['pc'] = self.cpu_instruction_address
        self.cpu_waiting_register = instruction.x
        self.cpu_keypad.start_wait()

    def poll_keypress(self):
        """
        Finish a pending Ft0A if a key went down since the wait started.
        """
        key_pressed = self.cpu_keypad.take_press()
        if key_pressed is None:
            return
        self.cpu_registers['v'][self.cpu_waiting_register] = key_pressed
        self.cpu_waiting_register = None
        self.skip_next()

    def move_reg_into_delay_timer(self, instruction):
        """
        Fs15 - LOAD DELAY, Vs

        Move the value stored in the specified source register into the delay
        timer.
        """
        self.cpu_timers['delay'] = self.cpu_registers['v'][instruction.x]

    def move_reg_into_sound_timer(self, instruction):
        """
        Fs18 - LOAD SOUND, Vs

        Move the value stored in the specified source register into the sound
        timer.
        """
        self.cpu_timers['sound'] = self.cpu_registers['v'][instruction.x]

    def add_reg_into_index(self, instruction):
        """
        Fs1E - ADD  I, Vs

        Add the value of the register into the index register value.
        """
        self.cpu_registers['index'] = (self.cpu_registers['index'] + self.cpu_registers['v'][instruction.x]) & INDEX_MASK

    def load_index_with_reg_sprite(self, instruction):
        """
        Fs29 - LOAD I, Vs

        Load the index with the font sprite for the hex digit in the source
        register. All font sprites are 5 bytes long.
        """
        self.cpu_registers['index'] = Memory.font_address(self.cpu_registers['v'][instruction.x])

    def store_bcd_in_memory(self, instruction):
        """
        Fs33 - BCD

        Take the value stored in source and place the digits in the following
        locations:

            hundreds   -> self.memory[index]
            tens       -> self.memory[index + 1]
            ones       -> self.memory[index + 2]

        For example, if the value is 123, then the following values will be
        placed at the specified locations:

             1 -> self.memory[index]
             2 -> self.memory[index + 1]
             3 -> self.memory[index + 2]
        """
        value = self.cpu_registers['v'][instruction.x]
        index = self.cpu_registers['index']
        for offset, digit in enumerate((value // 100, (value // 10) % 10, value % 10)):
            self.cpu_memory.write_byte((index + offset) & ADDRESS_MASK, digit)

    def store_regs_in_memory(self, instruction):
        """
        Fs55 - STOR [I], Vs

        Store registers V0 through Vs in the memory pointed to by the index
        register. For example, to store all of the V registers, s would
        be 'F'. The original interpreter leaves I pointing past the last
        stored byte; see the increment_index quirk.
        """
        index = self.cpu_registers['index']
        for counter in range(instruction.x + 1):
            self.cpu_memory.write_byte((index + counter) & ADDRESS_MASK, self.cpu_registers['v'][counter])
        self._advance_index(instruction)

    def read_regs_from_memory(self, instruction):
        """
        Fs65 - LOAD Vs, [I]

        Read registers V0 through Vs from the memory pointed to by the index
        register.
        """
        index = self.cpu_registers['index']
        for counter in range(instruction.x + 1):
            self.cpu_registers['v'][counter] = self.cpu_memory.read_byte((index + counter) & ADDRESS_MASK)
        self._advance_index(instruction)

    def _advance_index(self, instruction):
        if self.cpu_quirks.increment_index:
            self.cpu_registers['index'] = (self.cpu_registers['index'] + instruction.x + 1) & INDEX_MASK
