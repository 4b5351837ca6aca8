"""Tests for ALU operations (8xxx)."""

import pytest
from chipax import execute, create_state


class TestBasicALU:
    """Test basic ALU operations."""

    def test_alu_set_basic(self, fresh_state):
        """8XY0 - Set VX = VY."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x42))
        state = state.replace(V=state.V.at[2].set(0x99))

        state = execute(state, 0x8120)  # V1 = V2

        assert state.V[1] == 0x99
        assert state.V[2] == 0x99

    def test_alu_or_basic(self, fresh_state):
        """8XY1 - OR operation."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0xF0))
        state = state.replace(V=state.V.at[2].set(0x0F))

        state = execute(state, 0x8121)  # V1 |= V2

        assert state.V[1] == 0xFF

    def test_alu_and_basic(self, fresh_state):
        """8XY2 - AND operation."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0xF0))
        state = state.replace(V=state.V.at[2].set(0xF1))

        state = execute(state, 0x8122)  # V1 &= V2

        assert state.V[1] == 0xF0

    def test_alu_xor_basic(self, fresh_state):
        """8XY3 - XOR operation."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0xFF))
        state = state.replace(V=state.V.at[2].set(0xF0))

        state = execute(state, 0x8123)  # V1 ^= V2

        assert state.V[1] == 0x0F

    def test_logic_ops_leave_vf_alone(self, fresh_state):
        """8XY1/2/3 do not touch VF."""
        for instruction in (0x8121, 0x8122, 0x8123):
            state = fresh_state.replace(V=fresh_state.V.at[15].set(0x77))
            state = state.replace(V=state.V.at[1].set(0x0F))
            state = execute(state, instruction)
            assert state.V[15] == 0x77, f"{instruction:04X} changed VF"

    def test_add_immediate_wraps_without_flag(self, fresh_state):
        """7XNN - Wrapping add, VF untouched."""
        state = fresh_state.replace(V=fresh_state.V.at[3].set(0xFE))
        state = execute(state, 0x7305)  # V3 += 5

        assert state.V[3] == 0x03
        assert state.V[15] == 0


class TestALUArithmetic:
    """Test arithmetic ALU operations."""

    def test_alu_add_no_carry(self, fresh_state):
        """8XY4 - 0x01 + 0x01 = 0x02, no carry."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x01))
        state = state.replace(V=state.V.at[2].set(0x01))

        state = execute(state, 0x8124)  # V1 += V2

        assert state.V[1] == 0x02
        assert state.V[15] == 0

    def test_alu_add_with_carry(self, fresh_state):
        """8XY4 - 0xFF + 0x01 wraps to 0x00 with carry."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0xFF))
        state = state.replace(V=state.V.at[2].set(0x01))

        state = execute(state, 0x8124)  # V1 += V2

        assert state.V[1] == 0x00
        assert state.V[15] == 1

    def test_alu_add_clears_stale_carry(self, fresh_state):
        """8XY4 - VF is overwritten with 0 when there is no carry."""
        state = fresh_state.replace(V=fresh_state.V.at[15].set(1))
        state = state.replace(V=state.V.at[1].set(0x10))
        state = state.replace(V=state.V.at[2].set(0x20))

        state = execute(state, 0x8124)

        assert state.V[1] == 0x30
        assert state.V[15] == 0

    def test_alu_sub_xy_no_borrow(self, fresh_state):
        """8XY5 - Subtract VX - VY, VX > VY."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x30))
        state = state.replace(V=state.V.at[2].set(0x10))

        state = execute(state, 0x8125)  # V1 -= V2

        assert state.V[1] == 0x20
        assert state.V[15] == 1

    def test_alu_sub_xy_with_borrow(self, fresh_state):
        """8XY5 - Subtract VX - VY, with borrow."""
        state = fresh_state
        state = state.replace(V=state.V.at[3].set(0x10))
        state = state.replace(V=state.V.at[4].set(0x30))

        state = execute(state, 0x8345)  # V3 -= V4

        assert state.V[3] == 0xE0  # 16 - 48 = -32 -> 224
        assert state.V[15] == 0

    def test_alu_sub_xy_equal_operands(self, fresh_state):
        """8XY5 - Equal operands give 0 and a clear flag (strict comparison)."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x42))
        state = state.replace(V=state.V.at[2].set(0x42))

        state = execute(state, 0x8125)

        assert state.V[1] == 0
        assert state.V[15] == 0

    def test_alu_sub_yx_no_borrow(self, fresh_state):
        """8XY7 - Subtract VY - VX, VY > VX."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x10))
        state = state.replace(V=state.V.at[2].set(0x30))

        state = execute(state, 0x8127)  # V1 = V2 - V1

        assert state.V[1] == 0x20
        assert state.V[15] == 1

    def test_alu_sub_yx_with_borrow(self, fresh_state):
        """8XY7 - VY < VX wraps and clears the flag."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x30))
        state = state.replace(V=state.V.at[2].set(0x10))

        state = execute(state, 0x8127)

        assert state.V[1] == 0xE0
        assert state.V[15] == 0


class TestALUShifts:
    """Test shift operations with mode differences."""

    def test_shift_right_legacy_reads_vy(self, legacy_state):
        """8XY6 - VX = VY >> 1, VF = old LSB of VY."""
        state = legacy_state.replace(V=legacy_state.V.at[5].set(0x08))  # Ignored
        state = state.replace(V=state.V.at[6].set(0x03))  # 00000011

        state = execute(state, 0x8566)

        assert state.V[5] == 0x01
        assert state.V[6] == 0x03
        assert state.V[15] == 1

    def test_shift_left_legacy_reads_vy(self, legacy_state):
        """8XYE - VX = VY << 1 truncated, VF = old bit 7 of VY."""
        state = legacy_state.replace(V=legacy_state.V.at[3].set(0x00))
        state = state.replace(V=state.V.at[4].set(0x81))  # 10000001

        state = execute(state, 0x834E)

        assert state.V[3] == 0x02
        assert state.V[15] == 1

    def test_shift_left_legacy_no_carry(self, legacy_state):
        state = legacy_state.replace(V=legacy_state.V.at[4].set(0x41))

        state = execute(state, 0x834E)

        assert state.V[3] == 0x82
        assert state.V[15] == 0

    def test_shift_right_modern_odd(self, modern_state):
        """8XY6 - Shift right in place, modern mode."""
        state = modern_state.replace(V=modern_state.V.at[3].set(0x05))
        state = state.replace(V=state.V.at[4].set(0xFF))  # Ignored

        state = execute(state, 0x8346)  # V3 >>= 1

        assert state.V[3] == 0x02
        assert state.V[15] == 1

    def test_shift_left_modern_overflow(self, modern_state):
        """8XYE - Shift left in place, modern mode, with overflow."""
        state = modern_state.replace(V=modern_state.V.at[3].set(0x81))
        state = state.replace(V=state.V.at[4].set(0xFF))  # Ignored

        state = execute(state, 0x834E)  # V3 <<= 1

        assert state.V[3] == 0x02
        assert state.V[15] == 1

    def test_shift_mode_comparison(self):
        """modern_mode switches the shift source between VY and VX."""
        state_modern = create_state(modern_mode=True)
        state_modern = state_modern.replace(V=state_modern.V.at[1].set(0x08))
        state_modern = state_modern.replace(V=state_modern.V.at[2].set(0x03))
        state_modern = execute(state_modern, 0x8126)

        state_legacy = create_state(modern_mode=False)
        state_legacy = state_legacy.replace(V=state_legacy.V.at[1].set(0x08))
        state_legacy = state_legacy.replace(V=state_legacy.V.at[2].set(0x03))
        state_legacy = execute(state_legacy, 0x8126)

        assert state_modern.V[1] == 0x04  # 8 >> 1 (used V1)
        assert state_legacy.V[1] == 0x01  # 3 >> 1 (used V2)


class TestALUEdgeCases:
    """Test edge cases and comprehensive scenarios."""

    def test_alu_undefined_operations(self, fresh_state):
        """Undefined 8XYN variants change nothing."""
        undefined_ops = [0x8, 0x9, 0xA, 0xB, 0xC, 0xD, 0xF]

        for op in undefined_ops:
            state = fresh_state
            state = state.replace(V=state.V.at[1].set(0x42))
            state = state.replace(V=state.V.at[2].set(0x99))
            state = state.replace(V=state.V.at[15].set(0x07))

            state = execute(state, 0x8120 | op)

            assert state.V[1] == 0x42, f"Undefined op {op:X} changed VX"
            assert state.V[15] == 0x07, f"Undefined op {op:X} changed VF"

    def test_alu_self_operations(self, fresh_state):
        """Operations where VX and VY are the same register."""
        state = fresh_state.replace(V=fresh_state.V.at[5].set(0xAA))

        state = execute(state, 0x8553)
        assert state.V[5] == 0x00, "Self XOR should result in 0"

        state = state.replace(V=state.V.at[5].set(0x80))
        state = execute(state, 0x8554)  # V5 += V5
        assert state.V[5] == 0x00, "Self ADD should wrap on overflow"
        assert state.V[15] == 1, "Self ADD should set carry flag"

    def test_vf_as_source(self, fresh_state):
        """VF can be read as an operand before being overwritten."""
        state = fresh_state
        state = state.replace(V=state.V.at[15].set(0x42))
        state = state.replace(V=state.V.at[1].set(0x10))

        state = execute(state, 0x81F4)  # V1 += VF
        assert state.V[1] == 0x52
        assert state.V[15] == 0

    def test_flag_wins_when_vf_is_destination(self, fresh_state):
        """With X = F the flag is written after the result."""
        state = fresh_state
        state = state.replace(V=state.V.at[15].set(0xFF))
        state = state.replace(V=state.V.at[1].set(0x01))

        state = execute(state, 0x8F14)  # VF += V1 -> 0x00 with carry

        assert state.V[15] == 1

    def test_difference_wins_when_vf_is_destination(self, fresh_state):
        """8XY5 writes the flag before the result, so VF keeps the difference."""
        state = fresh_state
        state = state.replace(V=state.V.at[15].set(0x10))
        state = state.replace(V=state.V.at[1].set(0x05))

        state = execute(state, 0x8F15)  # VF = VF - V1

        assert state.V[15] == 0x0B

    def test_reverse_difference_wins_when_vf_is_destination(self, fresh_state):
        """8XY7 writes the flag before the result, so VF keeps the difference."""
        state = fresh_state
        state = state.replace(V=state.V.at[15].set(0x05))
        state = state.replace(V=state.V.at[1].set(0x10))

        state = execute(state, 0x8F17)  # VF = V1 - VF

        assert state.V[15] == 0x0B

    def test_flag_register_as_subtrahend(self, fresh_state):
        """8XF5 reads VF before the borrow flag overwrites it."""
        state = fresh_state
        state = state.replace(V=state.V.at[15].set(0x03))
        state = state.replace(V=state.V.at[2].set(0x10))

        state = execute(state, 0x82F5)  # V2 -= VF

        assert state.V[2] == 0x0D
        assert state.V[15] == 1
