"""Read-only views of emulator state for the debug overlay and trace log."""

from typing import List, Optional, Tuple

import numpy as np

from chipax.constants import MEMORY_SIZE
from chipax.decode import disassemble
from chipax.state import EmulatorState


def current_instruction(state: EmulatorState) -> Optional[Tuple[int, int, str]]:
    """Address, opcode and mnemonic of the instruction at ``pc``, None if out of bounds."""
    pc = int(state.pc)
    if pc + 1 >= MEMORY_SIZE:
        return None
    opcode = (int(state.memory[pc]) << 8) | int(state.memory[pc + 1])
    return pc, opcode, disassemble(opcode)


def status_lines(state: EmulatorState) -> List[str]:
    """PC, I, stack pointer, timers and the pending instruction."""
    instruction = current_instruction(state)
    if bool(state.waiting_for_key):
        pending = f"waiting for key -> V{int(state.key_register):X}"
    elif instruction is None:
        pending = "out of bounds"
    else:
        pending = f"{instruction[1]:04X} {instruction[2]}"
    return [
        f"PC: 0x{int(state.pc):03X}  {pending}",
        f"I: 0x{int(state.I):03X}  SP: {int(state.stack.pointer)}",
        f"Delay: {int(state.delay_timer)}  Sound: {int(state.sound_timer)}",
    ]


def register_lines(state: EmulatorState, per_line: int = 4) -> List[str]:
    """V0-VF as ``Vx:hh`` cells, ``per_line`` registers per line."""
    registers = np.asarray(state.V)
    return [
        " ".join(f"V{r:X}:{int(registers[r]):02X}" for r in range(row, min(row + per_line, len(registers))))
        for row in range(0, len(registers), per_line)
    ]


def memory_lines(state: EmulatorState, rows: int = 4, columns: int = 8) -> List[str]:
    """Hex dump of memory around ``pc``; the two opcode bytes are bracketed."""
    memory = np.asarray(state.memory)
    pc = int(state.pc)
    start = max(0, min((pc // columns) * columns - columns, MEMORY_SIZE - rows * columns))
    lines = []
    for row in range(rows):
        address = start + row * columns
        cells = []
        for offset in range(columns):
            cell = f"{int(memory[address + offset]):02X}"
            if address + offset in (pc, pc + 1):
                cell = f"[{cell}]"
            cells.append(cell)
        lines.append(f"{address:03X}: " + " ".join(cells))
    return lines


def stack_lines(state: EmulatorState) -> List[str]:
    """Return addresses currently on the stack, innermost last."""
    data = np.asarray(state.stack.data)
    depth = max(0, min(int(state.stack.pointer), len(data)))
    return [f"{slot:X}: 0x{int(data[slot]):03X}" for slot in range(depth)]
