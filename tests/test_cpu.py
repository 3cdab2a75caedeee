"""
Instruction-level tests. Each test loads a few hand-written op-codes at
0x200 and single-steps them with cycle().
"""
import enum

import pytest

from chip8.config import Quirks
from chip8.cpu import CPU
from chip8.decoder import Op, decode
from chip8.exception import (
    ProgramCounterError, StackOverflowError, StackUnderflowError, UnknownOpcodeError
)
from chip8.memory import Memory

from conftest import assemble, make_cpu, run


class TestFetch:

    @pytest.mark.parametrize("op_code", [
        0x00E0, 0x3001, 0x6012, 0x7001, 0x8014, 0xA300, 0xC0FF, 0xD001, 0xE09E, 0xF007, 0xF033,
    ])
    def test_pc_advances_by_two(self, op_code):
        cpu = make_cpu(op_code)
        cpu.cycle()
        assert cpu.cpu_registers['pc'] == 0x202

    def test_pc_advanced_before_execution(self):
        # CALL pushes the address after itself, i.e. the advanced PC
        cpu = make_cpu(0x2300)
        cpu.cycle()
        assert cpu.cpu_stack == [0x202]
        assert cpu.cpu_registers['pc'] == 0x300

    def test_big_endian_fetch(self):
        cpu = make_cpu(0x6A42)
        instruction = cpu.cycle()
        assert instruction.op is Op.LOAD_IMM
        assert cpu.cpu_registers['v'][0xA] == 0x42

    def test_unknown_op_code_reports_pc(self):
        cpu = make_cpu(0x6000, 0xF0FF)
        cpu.cycle()
        with pytest.raises(UnknownOpcodeError) as excinfo:
            cpu.cycle()
        assert excinfo.value.op_code == 0xF0FF
        assert excinfo.value.program_counter == 0x202

    def test_running_off_the_end_of_memory(self):
        cpu = make_cpu(0x1FFE)
        cpu.cycle()
        cpu.cycle()
        with pytest.raises(ProgramCounterError):
            cpu.cycle()

    def test_sys_is_ignored(self):
        cpu = make_cpu(0x0123)
        cpu.cycle()
        assert cpu.cpu_registers['pc'] == 0x202

    def test_every_op_has_a_routine(self):
        cpu = CPU()
        assert set(cpu.cpu_operation_lookup) == set(Op)

    def test_op_without_routine_is_rejected(self, monkeypatch):
        extended = enum.Enum('Op', [op.name for op in Op] + ['UNHANDLED'])
        monkeypatch.setattr('chip8.cpu.Op', extended)
        with pytest.raises(RuntimeError) as excinfo:
            CPU()
        assert 'UNHANDLED' in str(excinfo.value)


class TestFlowControl:

    def test_jump(self):
        cpu = make_cpu(0x1ABC)
        cpu.cycle()
        assert cpu.cpu_registers['pc'] == 0xABC

    def test_call_then_return(self):
        # 200: CALL 206 / 202: LD V0, 1 / 204: JP 204 / 206: RET
        cpu = make_cpu(0x2206, 0x6001, 0x1204, 0x00EE)
        cpu.cycle()
        assert cpu.cpu_registers['sp'] == 1
        cpu.cycle()
        assert cpu.cpu_registers['pc'] == 0x202
        assert cpu.cpu_registers['sp'] == 0
        assert cpu.cpu_stack == []
        cpu.cycle()
        assert cpu.cpu_registers['v'][0] == 1

    def test_seventeen_nested_calls_overflow(self):
        # Each call lands on the next call
        cpu = make_cpu(*[0x2202 + 2 * index for index in range(17)])
        run(cpu, 16)
        assert cpu.cpu_stack == [0x202 + 2 * index for index in range(16)]
        with pytest.raises(StackOverflowError) as excinfo:
            cpu.cycle()
        assert excinfo.value.program_counter == 0x220
        assert cpu.cpu_stack == [0x202 + 2 * index for index in range(16)]
        assert cpu.cpu_registers['sp'] == 16

    def test_configurable_stack_depth(self):
        cpu = make_cpu(0x2202, 0x2204, stack_depth=1)
        cpu.cycle()
        with pytest.raises(StackOverflowError):
            cpu.cycle()

    def test_return_with_empty_stack(self):
        cpu = make_cpu(0x00EE)
        with pytest.raises(StackUnderflowError) as excinfo:
            cpu.cycle()
        assert excinfo.value.op_code == 0x00EE

    def test_jump_with_offset(self):
        cpu = make_cpu(0x6010, 0xB300)
        run(cpu, 2)
        assert cpu.cpu_registers['pc'] == 0x310

    def test_jump_with_offset_wraps(self):
        cpu = make_cpu(0x60FF, 0xBFFF)
        run(cpu, 2)
        assert cpu.cpu_registers['pc'] == 0x0FE

    def test_jump_to_odd_address_is_aligned(self):
        cpu = make_cpu(0x1203)
        cpu.cycle()
        assert cpu.cpu_registers['pc'] == 0x202

    def test_call_to_odd_address_is_aligned(self):
        cpu = make_cpu(0x2205)
        cpu.cycle()
        assert cpu.cpu_registers['pc'] == 0x204
        assert cpu.cpu_stack == [0x202]

    def test_jump_with_odd_offset_is_aligned(self):
        cpu = make_cpu(0x6001, 0xB300)
        run(cpu, 2)
        assert cpu.cpu_registers['pc'] == 0x300


class TestSkips:

    @pytest.mark.parametrize("program, skipped", [
        ((0x6012, 0x3012), True),
        ((0x6012, 0x3013), False),
        ((0x6012, 0x4012), False),
        ((0x6012, 0x4013), True),
        ((0x6012, 0x6112, 0x5010), True),
        ((0x6012, 0x6113, 0x5010), False),
        ((0x6012, 0x6113, 0x9010), True),
        ((0x6012, 0x6112, 0x9010), False),
    ])
    def test_skip_adds_two_more(self, program, skipped):
        cpu = make_cpu(*program)
        run(cpu, len(program))
        expected = 0x200 + 2 * len(program) + (2 if skipped else 0)
        assert cpu.cpu_registers['pc'] == expected


class TestArithmetic:

    def test_load_and_add_immediate(self):
        cpu = make_cpu(0x6AFE, 0x7A03, 0x6F07, 0x7F01)
        run(cpu, 2)
        assert cpu.cpu_registers['v'][0xA] == 0x01
        assert cpu.cpu_registers['v'][0xF] == 0
        run(cpu, 2)
        assert cpu.cpu_registers['v'][0xF] == 8

    def test_move_and_logic(self):
        cpu = make_cpu(0x60F0, 0x613C, 0x8200, 0x8211, 0x8300, 0x8312, 0x8400, 0x8413)
        run(cpu, 8)
        assert cpu.cpu_registers['v'][2] == 0xFC
        assert cpu.cpu_registers['v'][3] == 0x30
        assert cpu.cpu_registers['v'][4] == 0xCC

    def test_logic_reset_vf_quirk(self):
        cpu = make_cpu(0x6F05, 0x8011, quirks=Quirks(reset_vf_on_logic=True))
        run(cpu, 2)
        assert cpu.cpu_registers['v'][0xF] == 0
        cpu = make_cpu(0x6F05, 0x8011)
        run(cpu, 2)
        assert cpu.cpu_registers['v'][0xF] == 5

    @pytest.mark.parametrize("vx, vy, result, flag", [
        (0x10, 0x20, 0x30, 0),
        (0xFF, 0x01, 0x00, 1),
        (0xFF, 0xFF, 0xFE, 1),
        (0x80, 0x7F, 0xFF, 0),
    ])
    def test_add_with_carry(self, vx, vy, result, flag):
        cpu = make_cpu(0x6000 | vx, 0x6100 | vy, 0x8014)
        run(cpu, 3)
        assert cpu.cpu_registers['v'][0] == result
        assert cpu.cpu_registers['v'][0xF] == flag

    @pytest.mark.parametrize("vx, vy, result, flag", [
        (0x30, 0x10, 0x20, 1),
        (0x10, 0x10, 0x00, 1),
        (0x10, 0x30, 0xE0, 0),
        (0x00, 0x01, 0xFF, 0),
    ])
    def test_subtract_with_borrow(self, vx, vy, result, flag):
        cpu = make_cpu(0x6000 | vx, 0x6100 | vy, 0x8015)
        run(cpu, 3)
        assert cpu.cpu_registers['v'][0] == result
        assert cpu.cpu_registers['v'][0xF] == flag

    @pytest.mark.parametrize("vx, vy, result, flag", [
        (0x10, 0x30, 0x20, 1),
        (0x10, 0x10, 0x00, 1),
        (0x30, 0x10, 0xE0, 0),
    ])
    def test_reverse_subtract(self, vx, vy, result, flag):
        cpu = make_cpu(0x6000 | vx, 0x6100 | vy, 0x8017)
        run(cpu, 3)
        assert cpu.cpu_registers['v'][0] == result
        assert cpu.cpu_registers['v'][0xF] == flag

    def test_flag_written_after_result_when_vf_is_target(self):
        # VF += V0 with a carry: the flag, not the sum, is left in VF
        cpu = make_cpu(0x6FFF, 0x6005, 0x8F04)
        run(cpu, 3)
        assert cpu.cpu_registers['v'][0xF] == 1
        # VF -= V0 without a borrow
        cpu = make_cpu(0x6F05, 0x6002, 0x8F05)
        run(cpu, 3)
        assert cpu.cpu_registers['v'][0xF] == 1
        # VF >>= 1 with bit 0 clear
        cpu = make_cpu(0x6F04, 0x8FF6)
        run(cpu, 2)
        assert cpu.cpu_registers['v'][0xF] == 0

    def test_reverse_subtract_flag_written_last(self):
        # VF = V0 - VF leaves the flag, not the difference of 3
        cpu = make_cpu(0x6F02, 0x6005, 0x8F07)
        run(cpu, 3)
        assert cpu.cpu_registers['v'][0xF] == 1
        # V0 = VF - V0 reads VF before the flag replaces it
        cpu = make_cpu(0x6003, 0x6F05, 0x80F7)
        run(cpu, 3)
        assert cpu.cpu_registers['v'][0] == 0x02
        assert cpu.cpu_registers['v'][0xF] == 1

    def test_shift_left_flag_written_last(self):
        # VF = V0 << 1 leaves the flag, not 0x80
        cpu = make_cpu(0x6040, 0x8F0E)
        run(cpu, 2)
        assert cpu.cpu_registers['v'][0xF] == 0
        # V0 = VF << 1 reads VF before the flag replaces it
        cpu = make_cpu(0x6FC1, 0x80FE)
        run(cpu, 2)
        assert cpu.cpu_registers['v'][0] == 0x82
        assert cpu.cpu_registers['v'][0xF] == 1

    def test_flag_written_after_result_when_vf_is_source(self):
        cpu = make_cpu(0x6001, 0x6FFF, 0x80F4)
        run(cpu, 3)
        assert cpu.cpu_registers['v'][0] == 0x00
        assert cpu.cpu_registers['v'][0xF] == 1


class TestShiftQuirk:

    def test_legacy_shift_reads_vy(self):
        cpu = make_cpu(0x6001, 0x6103, 0x8016, 0x6281, 0x8326)
        run(cpu, 3)
        assert cpu.cpu_registers['v'][0] == 0x01
        assert cpu.cpu_registers['v'][0xF] == 1
        run(cpu, 2)
        assert cpu.cpu_registers['v'][3] == 0x40
        assert cpu.cpu_registers['v'][2] == 0x81

    def test_legacy_shift_left(self):
        cpu = make_cpu(0x6181, 0x801E)
        run(cpu, 2)
        assert cpu.cpu_registers['v'][0] == 0x02
        assert cpu.cpu_registers['v'][0xF] == 1

    def test_modern_shift_in_place(self, modern_quirks):
        cpu = make_cpu(0x6006, 0x61FF, 0x8016, quirks=modern_quirks)
        run(cpu, 3)
        assert cpu.cpu_registers['v'][0] == 0x03
        assert cpu.cpu_registers['v'][0xF] == 0

        cpu = make_cpu(0x6081, 0x6100, 0x801E, quirks=modern_quirks)
        run(cpu, 3)
        assert cpu.cpu_registers['v'][0] == 0x02
        assert cpu.cpu_registers['v'][0xF] == 1


class TestIndexAndMemory:

    def test_load_and_add_index(self):
        cpu = make_cpu(0xAFFF, 0x6005, 0xF01E)
        run(cpu, 3)
        assert cpu.cpu_registers['index'] == 0x1004

    def test_font_address(self):
        cpu = make_cpu(0x600B, 0xF029)
        run(cpu, 2)
        assert cpu.cpu_registers['index'] == Memory.font_address(0xB)

    @pytest.mark.parametrize("value, digits", [(123, (1, 2, 3)), (7, (0, 0, 7)), (255, (2, 5, 5))])
    def test_bcd(self, value, digits):
        cpu = make_cpu(0x6000 | value, 0xA300, 0xF033)
        run(cpu, 3)
        assert tuple(cpu.cpu_memory.read_bytes(0x300, 3)) == digits
        assert cpu.cpu_registers['index'] == 0x300

    def test_dump_and_fill_increment_index(self):
        cpu = make_cpu(0x6011, 0x6122, 0x6233, 0xA300, 0xF255)
        run(cpu, 5)
        assert cpu.cpu_memory.read_bytes(0x300, 4) == b'\x11\x22\x33\x00'
        assert cpu.cpu_registers['index'] == 0x303

    def test_fill_increments_index(self):
        cpu = make_cpu(0xA206, 0xF165, 0x1204, 0xABCD)
        run(cpu, 2)
        assert cpu.cpu_registers['v'][0] == 0xAB
        assert cpu.cpu_registers['v'][1] == 0xCD
        assert cpu.cpu_registers['v'][2] == 0x00
        assert cpu.cpu_registers['index'] == 0x208

    def test_index_unchanged_quirk(self, modern_quirks):
        cpu = make_cpu(0x6011, 0xA300, 0xF055, 0xF065, quirks=modern_quirks)
        run(cpu, 4)
        assert cpu.cpu_registers['index'] == 0x300
        assert cpu.cpu_registers['v'][0] == 0x11

    def test_random_is_masked(self):
        cpu = make_cpu(*[0xC00F] * 20)
        for _ in range(20):
            cpu.cycle()
            assert cpu.cpu_registers['v'][0] & 0xF0 == 0


class TestDraw:

    def test_draw_and_erase(self):
        # I points at the FF byte at 0x206
        cpu = make_cpu(0xA206, 0xD011, 0xD011, 0xFF00)
        run(cpu, 2)
        assert all(cpu.cpu_display.get_pixel(x, 0) for x in range(8))
        assert cpu.cpu_registers['v'][0xF] == 0
        cpu.cycle()
        assert not any(cpu.cpu_display.get_pixel(x, 0) for x in range(8))
        assert cpu.cpu_registers['v'][0xF] == 1

    def test_draw_font_glyph(self):
        cpu = make_cpu(0x6000, 0xF029, 0x6105, 0x6203, 0xD125)
        run(cpu, 5)
        frame = cpu.cpu_display.snapshot()
        assert [frame[3 + row][5:9] for row in range(5)] == [
            (True, True, True, True),
            (True, False, False, True),
            (True, False, False, True),
            (True, False, False, True),
            (True, True, True, True),
        ]

    def test_draw_clips_by_default(self):
        cpu = make_cpu(0x603C, 0xA20A, 0xD011, 0x1206, 0x0000, 0xFF00)
        run(cpu, 3)
        assert cpu.cpu_display.get_pixel(63, 0)
        assert not cpu.cpu_display.get_pixel(0, 0)

    def test_draw_wraps_with_quirk(self, modern_quirks):
        cpu = make_cpu(0x603C, 0xA20A, 0xD011, 0x1206, 0x0000, 0xFF00, quirks=modern_quirks)
        run(cpu, 3)
        assert cpu.cpu_display.get_pixel(63, 0)
        assert cpu.cpu_display.get_pixel(3, 0)

    def test_sprite_rows_wrap_past_end_of_memory(self):
        # Rows come from 0xFFF then 0x000, the top row of the 0 glyph
        cpu = make_cpu(0xAFFF, 0xD012)
        run(cpu, 2)
        assert not any(cpu.cpu_display.get_pixel(x, 0) for x in range(8))
        assert [cpu.cpu_display.get_pixel(x, 1) for x in range(8)] == [True] * 4 + [False] * 4

    def test_clear_screen(self):
        cpu = make_cpu(0xA206, 0xD011, 0x00E0, 0xFF00)
        run(cpu, 3)
        assert not any(any(row) for row in cpu.cpu_display.snapshot())


class TestKeys:

    def test_skip_if_pressed(self):
        cpu = make_cpu(0x6007, 0xE09E, 0x0000, 0xE0A1)
        cpu.cpu_keypad.set_key(0x7, True)
        run(cpu, 2)
        assert cpu.cpu_registers['pc'] == 0x206
        cpu.cycle()
        assert cpu.cpu_registers['pc'] == 0x208

    def test_skip_if_not_pressed(self):
        cpu = make_cpu(0x6007, 0xE0A1, 0x0000, 0xE09E)
        run(cpu, 2)
        assert cpu.cpu_registers['pc'] == 0x206
        cpu.cycle()
        assert cpu.cpu_registers['pc'] == 0x208

    def test_wait_holds_pc_until_press(self):
        cpu = make_cpu(0x6A3C, 0xFA15, 0xF50A, 0x6001)
        run(cpu, 3)
        assert cpu.awaiting_key
        assert cpu.cpu_registers['pc'] == 0x204

        for _ in range(10):
            assert cpu.cycle() is None
            cpu.timer_tick()
            assert cpu.cpu_registers['pc'] == 0x204
        assert cpu.cpu_timers['delay'] == 0x3C - 10

        cpu.cpu_keypad.set_key(0xE, True)
        cpu.cycle()
        assert not cpu.awaiting_key
        assert cpu.cpu_registers['pc'] == 0x206
        assert cpu.cpu_registers['v'][5] == 0xE
        cpu.cycle()
        assert cpu.cpu_registers['v'][0] == 1

    def test_wait_ignores_keys_already_held(self):
        cpu = make_cpu(0xF50A)
        cpu.cpu_keypad.set_key(0x3, True)
        run(cpu, 3)
        assert cpu.awaiting_key
        cpu.cpu_keypad.set_key(0x3, True)
        cpu.cycle()
        assert cpu.awaiting_key
        cpu.cpu_keypad.set_key(0x3, False)
        cpu.cpu_keypad.set_key(0x3, True)
        cpu.cycle()
        assert cpu.cpu_registers['v'][5] == 0x3


class TestTimerInstructions:

    def test_set_and_read_timers(self):
        cpu = make_cpu(0x6020, 0xF015, 0xF018, 0xF107)
        run(cpu, 3)
        cpu.timer_tick()
        cpu.cycle()
        assert cpu.cpu_registers['v'][1] == 0x1F
        assert cpu.cpu_timers['sound'] == 0x1F
        assert cpu.sound_active


class TestDebugDump:

    def test_str_lists_registers(self):
        cpu = make_cpu(0x6A42)
        cpu.cycle()
        dump = str(cpu)
        assert 'PC:  200' in dump
        assert 'VA: 42' in dump


def test_execute_decoded_instruction_directly():
    cpu = CPU()
    cpu.load(assemble())
    cpu.execute(decode(0x6533))
    assert cpu.cpu_registers['v'][5] == 0x33
