"""pygame front-end: window, keypad mapping, 60 Hz scheduler and debug overlay."""

import os
import time

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import jax
import jax.numpy as jnp
import pygame

from chipax.config import EmulatorConfig
from chipax.constants import SCREEN_WIDTH, SCREEN_HEIGHT, NUM_KEYS
from chipax.debug import status_lines, register_lines, memory_lines
from chipax.emulator import traced_cycle, tick_timers, load_rom_bytes
from chipax.errors import Chip8Error
from chipax.logging import get_logger
from chipax.rendering import create_color_scheme
from chipax.state import EmulatorState, create_state

# Conventional 4x4 block: 1234/QWER/ASDF/ZXCV -> 123C/456D/789E/A0BF
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}

MIN_IPF = 1
MAX_IPF = 100


def draw_overlay_text(surface, text_lines, position, font, bg_color=(0, 0, 0), text_color=(255, 255, 255), alpha=120):
    """Draw text with semi-transparent background overlay"""
    if not text_lines:
        return

    line_height = font.get_height()
    max_width = max(font.size(line)[0] for line in text_lines)
    overlay_height = len(text_lines) * line_height + 8
    overlay_width = max_width + 16

    overlay = pygame.Surface((overlay_width, overlay_height))
    overlay.set_alpha(alpha)
    overlay.fill(bg_color)
    surface.blit(overlay, position)

    x, y = position
    for i, line in enumerate(text_lines):
        text_surface = font.render(line, True, text_color)
        surface.blit(text_surface, (x + 8, y + 4 + i * line_height))


def draw_display(surface, display, scale, on_color, off_color):
    """Draw each lit cell as a filled square of side ``scale``."""
    surface.fill(off_color)
    cells = jax.device_get(display)
    for y in range(SCREEN_HEIGHT):
        for x in range(SCREEN_WIDTH):
            if cells[y, x]:
                pygame.draw.rect(surface, on_color, pygame.Rect(x * scale, y * scale, scale, scale))


def draw_debug_overlay(surface, state: EmulatorState, keypad, scale, ipf, fps, status):
    """Registers, memory around PC and held keys over the game area."""
    font_small = pygame.font.Font(None, 18)
    font_tiny = pygame.font.Font(None, 16)
    width, height = SCREEN_WIDTH * scale, SCREEN_HEIGHT * scale

    info = status_lines(state) + [f"IPF: {ipf}  FPS: {fps:.1f}", f"Status: {status}"]
    draw_overlay_text(surface, info, (5, 5), font_small, alpha=100)
    draw_overlay_text(surface, register_lines(state), (5, height - 80), font_tiny, alpha=80)
    draw_overlay_text(surface, memory_lines(state), (width - 230, 5), font_tiny,
                      text_color=(255, 255, 0), alpha=100)

    pressed_keys = [f"{i:X}" for i in range(NUM_KEYS) if keypad[i]]
    if pressed_keys:
        draw_overlay_text(surface, ["Keys: " + " ".join(pressed_keys)],
                          (width - 100, height - 25), font_tiny, alpha=150)


def run_frame(state: EmulatorState, keypad, cycles: int) -> EmulatorState:
    """One display frame: publish held keys, tick timers once, run ``cycles`` cycles.

    Timers tick every frame even when ``cycles`` is 0 (step mode between
    presses), so their 60 Hz rate does not depend on the instruction rate.
    """
    state = state.replace(keypad=jnp.array(keypad, dtype=jnp.bool_))
    state = tick_timers(state)
    for _ in range(cycles):
        state = traced_cycle(state)
    return state


def run_emulator(config: EmulatorConfig) -> int:
    """Main windowed loop. Returns a process exit status."""
    logger = get_logger()

    with open(config.rom_path, 'rb') as f:
        rom_data = f.read()

    def fresh_state():
        state = create_state(jax.random.PRNGKey(config.seed), modern_mode=config.modern_mode)
        return load_rom_bytes(state, rom_data)

    state = fresh_state()
    logger.info(f"Loaded: {config.rom_path} ({len(rom_data)} bytes)")

    pygame.init()
    scale = config.scale
    screen = pygame.display.set_mode((SCREEN_WIDTH * scale, SCREEN_HEIGHT * scale))
    pygame.display.set_caption(f"Chipax - {os.path.basename(config.rom_path)}")
    clock = pygame.time.Clock()
    on_color, off_color = create_color_scheme(config.color_scheme)

    keypad_state = [False] * NUM_KEYS
    ipf = config.instructions_per_frame
    instruction_count = 0
    running = True
    paused = False
    halted = False
    step_mode = config.step_mode
    step_requested = False
    show_debug = config.show_debug or config.step_mode

    frame_count = 0
    fps_start_time = time.time()
    current_fps = float(config.fps)

    logger.info("Controls: ESC=Quit, F1=Debug, F2=Pause, F5=Reset, F6=Step mode, "
                "Space=Step, PgUp/PgDn=Speed")

    while running:
        clock.tick(config.fps)

        frame_count += 1
        current_time = time.time()
        if current_time - fps_start_time >= 1.0:
            current_fps = frame_count / (current_time - fps_start_time)
            frame_count = 0
            fps_start_time = current_time

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_F1:
                    show_debug = not show_debug
                elif event.key == pygame.K_F2:
                    paused = not paused
                elif event.key == pygame.K_F5:
                    state = fresh_state()
                    instruction_count = 0
                    halted = False
                    logger.info("Reset")
                elif event.key == pygame.K_F6:
                    step_mode = not step_mode
                    show_debug = show_debug or step_mode
                elif event.key == pygame.K_SPACE:
                    step_requested = step_mode
                elif event.key == pygame.K_PAGEUP:
                    ipf = min(MAX_IPF, ipf + 2)
                    logger.info(f"Speed: {ipf} IPF")
                elif event.key == pygame.K_PAGEDOWN:
                    ipf = max(MIN_IPF, ipf - 2)
                    logger.info(f"Speed: {ipf} IPF")
                elif event.key in KEY_MAP:
                    keypad_state[KEY_MAP[event.key]] = True
            elif event.type == pygame.KEYUP:
                if event.key in KEY_MAP:
                    keypad_state[KEY_MAP[event.key]] = False

        if step_mode:
            cycles = 1 if step_requested else 0
        else:
            cycles = ipf
        step_requested = False

        if not (halted or paused):
            try:
                state = run_frame(state, keypad_state, cycles)
                instruction_count += cycles
            except Chip8Error as e:
                logger.critical(f"{e}; execution halted (F5 to reset)")
                halted = True

        draw_display(screen, state.display, scale, on_color, off_color)

        if show_debug:
            status = "HALTED" if halted else "PAUSED" if paused else "STEP" if step_mode else "RUNNING"
            draw_debug_overlay(screen, state, keypad_state, scale, ipf, current_fps, status)
        elif paused or halted:
            font = pygame.font.Font(None, 24)
            message = "HALTED - F5 to reset" if halted else "PAUSED - F2 to resume"
            screen.blit(font.render(message, True, (255, 255, 0)), (10, 10))

        pygame.display.flip()

    pygame.quit()
    logger.log_run_end({"instructions": instruction_count, "halted": halted})
    return 1 if halted else 0
