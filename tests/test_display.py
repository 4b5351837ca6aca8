"""Tests for display operations (DXYN)."""

import jax.numpy as jnp
import pytest
from chipax import execute
from conftest import setup_sprite_in_memory


class TestBasicSprites:
    """Test basic sprite drawing."""

    def test_basic_sprite_draw(self, fresh_state):
        """Basic sprite drawing without collision."""
        state = fresh_state

        sprite = [0xC0, 0xC0]  # 11000000, 11000000
        state = setup_sprite_in_memory(state, 0x300, sprite)

        state = execute(state, 0x600A)  # V0 = 10
        state = execute(state, 0x6105)  # V1 = 5
        state = execute(state, 0xA300)  # I = 0x300

        state = execute(state, 0xD012)

        # display is indexed [y, x]
        assert state.display[5, 10]
        assert state.display[5, 11]
        assert state.display[6, 10]
        assert state.display[6, 11]
        assert not state.display[5, 12]
        assert jnp.sum(state.display) == 4

        assert state.V[15] == 0

    def test_collision_detection(self, fresh_state):
        """Collision flag when sprite erases an existing pixel."""
        state = fresh_state

        state = setup_sprite_in_memory(state, 0x400, [0x80])

        state = execute(state, 0x6014)  # V0 = 20
        state = execute(state, 0x610A)  # V1 = 10
        state = execute(state, 0xA400)

        state = execute(state, 0xD011)
        assert state.display[10, 20]
        assert state.V[15] == 0

        state = execute(state, 0xD011)
        assert not state.display[10, 20]
        assert state.V[15] == 1

    def test_double_draw_restores_display(self, fresh_state):
        """Drawing the same sprite twice restores the previous display."""
        state = fresh_state
        state = setup_sprite_in_memory(state, 0x500, [0xF0, 0x90, 0xF0])
        state = state.replace(display=state.display.at[16, 8].set(True))
        before = state.display

        state = execute(state, 0x6008)
        state = execute(state, 0x610F)
        state = execute(state, 0xA500)

        state = execute(state, 0xD013)
        assert state.V[15] == 1  # (8, 16) was lit under the sprite
        state = execute(state, 0xD013)

        assert jnp.array_equal(state.display, before)
        assert state.V[15] == 1

    def test_only_lit_to_unlit_counts_as_collision(self, fresh_state):
        """Lighting cells next to lit ones is not a collision."""
        state = fresh_state
        state = setup_sprite_in_memory(state, 0x500, [0x0F])
        state = state.replace(display=state.display.at[0, 0].set(True))

        state = execute(state, 0xA500)
        state = execute(state, 0xD011)  # draws x = 4..7 on row 0

        assert state.V[15] == 0
        assert state.display[0, 0]


class TestScreenWrapping:
    """Sprites wrap around both screen edges."""

    def test_wrap_right_edge(self, fresh_state):
        """x = 60 with an 8-wide sprite wraps columns 64..67 to 0..3."""
        state = setup_sprite_in_memory(fresh_state, 0x600, [0xFF])

        state = execute(state, 0x603C)  # V0 = 60
        state = execute(state, 0x6100)  # V1 = 0
        state = execute(state, 0xA600)
        state = execute(state, 0xD011)

        for x in (60, 61, 62, 63, 0, 1, 2, 3):
            assert state.display[0, x], f"column {x} not drawn"
        assert jnp.sum(state.display) == 8

    def test_wrap_bottom_edge(self, fresh_state):
        """y = 30 with a 3-row sprite wraps the last row to row 0."""
        state = setup_sprite_in_memory(fresh_state, 0x700, [0x80, 0x80, 0x80])

        state = execute(state, 0x6000)
        state = execute(state, 0x611E)  # V1 = 30
        state = execute(state, 0xA700)
        state = execute(state, 0xD013)

        assert state.display[30, 0]
        assert state.display[31, 0]
        assert state.display[0, 0]

    def test_wrap_corner(self, fresh_state):
        """Anchor (63, 31): second column lands in column 0, second row in row 0."""
        state = setup_sprite_in_memory(fresh_state, 0x800, [0xC0, 0xC0])

        state = execute(state, 0x603F)  # V0 = 63
        state = execute(state, 0x611F)  # V1 = 31
        state = execute(state, 0xA800)
        state = execute(state, 0xD012)

        assert state.display[31, 63]
        assert state.display[31, 0]
        assert state.display[0, 63]
        assert state.display[0, 0]
        assert jnp.sum(state.display) == 4

    def test_coordinate_modulo(self, fresh_state):
        """Start coordinates beyond the screen are reduced modulo its size."""
        state = setup_sprite_in_memory(fresh_state, 0x800, [0x80])

        state = execute(state, 0x6046)  # V0 = 70 -> 6
        state = execute(state, 0x6125)  # V1 = 37 -> 5
        state = execute(state, 0xA800)
        state = execute(state, 0xD011)

        assert state.display[5, 6]


class TestSpriteVariations:
    """Test different sprite configurations."""

    def test_different_sprite_heights(self, fresh_state):
        """Only N rows are drawn."""
        sprite = [0x80, 0x40, 0x20, 0x10, 0x08]  # Diagonal line
        state = setup_sprite_in_memory(fresh_state, 0x900, sprite)

        state = execute(state, 0x600A)
        state = execute(state, 0x6108)
        state = execute(state, 0xA900)
        state = execute(state, 0xD013)

        assert state.display[8, 10]
        assert state.display[9, 11]
        assert state.display[10, 12]
        assert not state.display[11, 13]

    def test_zero_height_draws_nothing(self, fresh_state):
        state = setup_sprite_in_memory(fresh_state, 0x900, [0xFF])
        state = execute(state, 0xA900)
        state = execute(state, 0xD010)

        assert not jnp.any(state.display)
        assert state.V[15] == 0

    def test_font_digit_sprite(self, fresh_state):
        """The built-in '0' glyph draws as a 4x5 ring."""
        state = execute(fresh_state, 0x6000)
        state = execute(state, 0xF029)  # I = glyph for V0
        state = execute(state, 0xD005)

        expected = jnp.array([
            [1, 1, 1, 1],
            [1, 0, 0, 1],
            [1, 0, 0, 1],
            [1, 0, 0, 1],
            [1, 1, 1, 1],
        ], dtype=jnp.bool_)
        assert jnp.array_equal(state.display[0:5, 0:4], expected)

    def test_vf_cleared_without_collision(self, fresh_state):
        """VF is reset to 0 before drawing."""
        state = setup_sprite_in_memory(fresh_state, 0xB00, [0x80])

        state = execute(state, 0x6F01)  # VF = 1
        state = execute(state, 0x6005)
        state = execute(state, 0x6105)
        state = execute(state, 0xAB00)
        state = execute(state, 0xD011)

        assert state.V[15] == 0
