"""Console logging utilities for the Chipax interpreter.

Provides a small colour-aware console logger, an interpreter-specific
subclass for run summaries and instruction traces, and the diagnostic hook
that compiled instruction handlers call back into for unhandled opcodes.
"""

import time
import sys
from typing import Any, Dict, Iterable, Optional

from tqdm import tqdm


class ConsoleLogger:
    """Flexible console logger with level filtering and colours."""

    def __init__(
        self,
        name: str = "Chipax",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.use_colors = (
            use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }

    def is_enabled(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order.get(
            self.log_level, 1
        )

    def set_level(self, log_level: str):
        level = log_level.upper()
        if level not in self.level_order:
            raise ValueError(
                f"Unknown log level '{log_level}'. Available: {list(self.level_order)}"
            )
        self.log_level = level

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self.is_enabled(level):
            formatted = self._format_message(level, message)
            print(formatted, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


class EmulatorLogger(ConsoleLogger):
    """Logger for interpreter runs: configuration banner, traces and summaries."""

    def __init__(self, name: str = "Chipax", **kwargs):
        super().__init__(name, **kwargs)
        self.unhandled_opcodes: Dict[int, int] = {}

    def log_run_start(self, config: Dict[str, Any]):
        """Log run configuration."""
        self.info("=" * 60)
        self.info("Starting CHIP-8 run with configuration:")
        for key, value in config.items():
            self.info(f"  {key}: {value}")
        self.info("=" * 60)

    def log_instruction(self, address: int, instruction: int, mnemonic: str):
        """Trace one executed instruction (DEBUG level)."""
        self.debug(f"[0x{address:03X}] {instruction:04X}  {mnemonic}")

    def log_registers(self, registers: Iterable[int], index: int, pc: int, sp: int,
                      delay_timer: int, sound_timer: int):
        """Dump the register file on one block of lines."""
        registers = list(registers)
        for row in range(0, len(registers), 4):
            cells = " ".join(f"V{r:X}={registers[r]:02X}" for r in range(row, row + 4))
            self.info(f"  {cells}")
        self.info(
            f"  PC={pc:03X} I={index:03X} SP={sp:X} DT={delay_timer:02X} ST={sound_timer:02X}"
        )

    def log_unhandled(self, instruction: int, address: int):
        count = self.unhandled_opcodes.get(instruction, 0) + 1
        self.unhandled_opcodes[instruction] = count
        # Repeats of the same opcode only show up in debug output.
        level = "WARNING" if count == 1 else "DEBUG"
        self.log(level, f"Unhandled opcode {instruction:04X} at 0x{address:03X}")

    def log_run_end(self, stats: Dict[str, Any]):
        """Log run completion with final statistics."""
        elapsed = time.time() - self.start_time
        self.info("=" * 60)
        self.info(f"Run finished in {elapsed:.1f}s")
        for key, value in stats.items():
            if isinstance(value, float):
                self.info(f"  {key}: {value:.2f}")
            else:
                self.info(f"  {key}: {value}")
        if self.unhandled_opcodes:
            opcodes = ", ".join(f"{op:04X}x{n}" for op, n in sorted(self.unhandled_opcodes.items()))
            self.info(f"  unhandled opcodes: {opcodes}")
        self.info("=" * 60)


_logger: Optional[EmulatorLogger] = None


def get_logger() -> EmulatorLogger:
    """Return the shared interpreter logger, creating it on first use."""
    global _logger
    if _logger is None:
        _logger = EmulatorLogger()
    return _logger


def set_log_level(log_level: str):
    get_logger().set_level(log_level)


def report_unhandled_opcode(instruction, address):
    """Host callback for unhandled opcodes; runs outside the compiled step."""
    get_logger().log_unhandled(int(instruction), int(address))


def progress_bar(n: int, desc: Optional[str] = None, enabled: bool = True, **kwargs) -> tqdm:
    """Frame progress bar for headless runs."""
    if desc is None:
        desc = f"Running ({n:,} frames)"
    return tqdm(total=n, desc=desc, unit="frame", disable=not enabled, **kwargs)
