"""
Shared fixtures for the Chip 8 test suite. Programs are written as lists
of 16-bit op-codes and assembled into big-endian bytes.
"""
import random

import pytest

from chip8.config import Quirks
from chip8.cpu import CPU


def assemble(*op_codes):
    program = bytearray()
    for op_code in op_codes:
        program += op_code.to_bytes(2, 'big')
    return bytes(program)


def make_cpu(*op_codes, **kwargs):
    kwargs.setdefault('rng', random.Random(8))
    cpu = CPU(**kwargs)
    cpu.load(assemble(*op_codes))
    return cpu


def run(cpu, cycles):
    for _ in range(cycles):
        cpu.cycle()
    return cpu


@pytest.fixture
def modern_quirks():
    return Quirks(shift_in_place=True, increment_index=False, wrap_sprites=True)
