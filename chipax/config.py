"""Run configuration for the interpreter front-ends."""

import dataclasses
from typing import Any, Dict, Optional

from chipax.constants import DEFAULT_INSTRUCTIONS_PER_FRAME, TIMER_FREQUENCY
from chipax.rendering import COLOR_SCHEMES


@dataclasses.dataclass
class EmulatorConfig:
    """Settings shared by the windowed and headless runners.

    Attributes:
        rom_path: Path to the CHIP-8 ROM file to load
        scale: Size in screen pixels of one CHIP-8 cell
        instructions_per_frame: Cycles run per 60 Hz frame (10 gives ~600 Hz)
        fps: Frame and timer rate
        modern_mode: Use CHIP-48 shift, load/store and BXNN behaviour
        color_scheme: Name of a scheme in ``rendering.COLOR_SCHEMES``
        show_debug: Start with the debug overlay visible
        step_mode: Start paused, executing one cycle per Space press
        seed: Seed for the RND instruction's PRNG key
        log_level: Console log level; DEBUG traces every instruction
        headless_frames: Run this many frames without a window
        record_path: MP4 file to record headless frames into
        screenshot_path: PNG file for the final headless frame
    """
    rom_path: str
    scale: int = 10
    instructions_per_frame: int = DEFAULT_INSTRUCTIONS_PER_FRAME
    fps: int = TIMER_FREQUENCY
    modern_mode: bool = False
    color_scheme: str = "classic"
    show_debug: bool = False
    step_mode: bool = False
    seed: int = 0
    log_level: str = "INFO"
    headless_frames: Optional[int] = None
    record_path: Optional[str] = None
    screenshot_path: Optional[str] = None

    def validate(self) -> "EmulatorConfig":
        """Check value ranges, raising ValueError on the first bad field."""
        if self.scale <= 0:
            raise ValueError(f"scale must be positive, got {self.scale}")
        if self.instructions_per_frame <= 0:
            raise ValueError(
                f"instructions_per_frame must be positive, got {self.instructions_per_frame}"
            )
        if self.fps <= 0:
            raise ValueError(f"fps must be positive, got {self.fps}")
        if self.color_scheme not in COLOR_SCHEMES:
            raise ValueError(
                f"Unknown color scheme '{self.color_scheme}'. Available: {list(COLOR_SCHEMES)}"
            )
        if self.headless_frames is not None and self.headless_frames < 0:
            raise ValueError(f"headless_frames must be >= 0, got {self.headless_frames}")
        return self

    @property
    def instruction_frequency(self) -> int:
        """Effective CPU rate in Hz."""
        return self.instructions_per_frame * self.fps

    def as_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)
