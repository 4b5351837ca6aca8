"""CHIP-8 rendering utilities for visualization."""

from typing import Sequence, Tuple

import cv2
import jax.numpy as jnp
import numpy as np
from PIL import Image

from chipax.constants import SCREEN_WIDTH, SCREEN_HEIGHT
from chipax.logging import get_logger

COLOR_SCHEMES = {
    "classic": ((0, 255, 0), (0, 0, 0)),  # Green on black
    "white": ((255, 255, 255), (0, 0, 0)),  # White on black
    "amber": ((255, 176, 0), (0, 0, 0)),  # Amber on black
    "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
    "retro": ((255, 255, 0), (64, 0, 64)),  # Yellow on purple
}


def display_to_rgb(
    display: jnp.ndarray,
    scale: int = 8,
    on_color: Tuple[int, int, int] = (0, 255, 0),
    off_color: Tuple[int, int, int] = (0, 0, 0),
) -> np.ndarray:
    """Convert CHIP-8 boolean display to RGB array with optional upscaling.

    Args:
        display: Boolean array of shape (32, 64), row-major
        scale: Upscaling factor for better visibility (default: 8x)
        on_color: RGB color for lit cells (default: green)
        off_color: RGB color for unlit cells (default: black)

    Returns:
        RGB array of shape (32*scale, 64*scale, 3) with uint8 values
    """
    pixels = np.array(display, dtype=np.bool_)
    height, width = pixels.shape

    rgb_frame = np.zeros((height, width, 3), dtype=np.uint8)

    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    # Nearest neighbour upscaling: each cell becomes a filled square
    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


def create_color_scheme(
    scheme: str = "classic",
) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """Get predefined color schemes for CHIP-8 rendering.

    Args:
        scheme: Color scheme name (see ``COLOR_SCHEMES``)

    Returns:
        Tuple of (on_color, off_color) as RGB tuples
    """
    if scheme not in COLOR_SCHEMES:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(COLOR_SCHEMES.keys())}"
        )

    return COLOR_SCHEMES[scheme]


def save_screenshot(
    display: jnp.ndarray,
    filename: str,
    scale: int = 8,
    color_scheme: str = "classic",
) -> None:
    """Write the display to an image file (format picked from the extension)."""
    on_color, off_color = create_color_scheme(color_scheme)
    Image.fromarray(display_to_rgb(display, scale, on_color, off_color)).save(filename)
    get_logger().info(f"Screenshot saved: {filename}")


def create_video(
        frames: Sequence[jnp.ndarray],
        filename: str,
        fps: float = 60.0,
        scale: int = 8,
        color_scheme: str = "classic",
        persistence: bool = True,
) -> None:
    """Save a sequence of CHIP-8 displays as an MP4 video.

    Args:
        frames: Displays of shape (32, 64), or one array of shape (N, 32, 64)
        filename: Output MP4 file
        fps: Video frame rate
        scale: Upscaling factor
        color_scheme: Color scheme for rendering
        persistence: Enable phosphor screen simulation (smooth fading), which
            hides the flicker of XOR-drawn sprites
    """
    displays = np.asarray(frames, dtype=np.bool_)
    if len(displays.shape) != 3 or displays.shape[1:] != (SCREEN_HEIGHT, SCREEN_WIDTH):
        raise ValueError(
            f"Expected display shape (N, {SCREEN_HEIGHT}, {SCREEN_WIDTH}), got {displays.shape}"
        )

    height, width = SCREEN_HEIGHT * scale, SCREEN_WIDTH * scale
    on_color, off_color = np.array(create_color_scheme(color_scheme))

    fourcc = cv2.VideoWriter_fourcc(*'mp4v')
    writer = cv2.VideoWriter(filename, fourcc, fps, (width, height))

    glow = np.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=np.float32)
    decay = 0.8

    try:
        for frame_display in displays:
            if persistence:
                glow = np.clip(glow * decay + frame_display.astype(np.float32), 0.0, 1.0)
                pixel_values = glow
            else:
                pixel_values = frame_display.astype(np.float32)

            frame = np.zeros((SCREEN_HEIGHT, SCREEN_WIDTH, 3), dtype=np.uint8)
            for c in range(3):
                frame[:, :, c] = off_color[c] + pixel_values * (on_color[c] - off_color[c])

            if scale > 1:
                frame = np.repeat(np.repeat(frame, scale, axis=0), scale, axis=1)
            writer.write(cv2.cvtColor(frame, cv2.COLOR_RGB2BGR))
    finally:
        writer.release()

    duration = len(displays) / fps
    get_logger().info(f"Video saved: {filename} ({len(displays)} frames, {fps} FPS, {duration:.1f}s)")
