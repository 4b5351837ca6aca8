"""CHIP-8 instruction decoding."""

import enum

import jax.numpy as jnp
from chex import dataclass


class Op(enum.IntEnum):
    """Instruction families, one per opcode pattern.

    The value doubles as the branch index of the executor's dispatch table.
    """
    SYS = 0        # 0nnn
    CLS = 1        # 00E0
    RET = 2        # 00EE
    JP = 3         # 1nnn
    CALL = 4       # 2nnn
    SE_BYTE = 5    # 3xkk
    SNE_BYTE = 6   # 4xkk
    SE_REG = 7     # 5xy0
    LD_BYTE = 8    # 6xkk
    ADD_BYTE = 9   # 7xkk
    LD_REG = 10    # 8xy0
    OR = 11        # 8xy1
    AND = 12       # 8xy2
    XOR = 13       # 8xy3
    ADD_REG = 14   # 8xy4
    SUB = 15       # 8xy5
    SHR = 16       # 8xy6
    SUBN = 17      # 8xy7
    SHL = 18       # 8xyE
    SNE_REG = 19   # 9xy0
    LD_I = 20      # Annn
    JP_V0 = 21     # Bnnn
    RND = 22       # Cxkk
    DRW = 23       # Dxyn
    SKP = 24       # Ex9E
    SKNP = 25      # ExA1
    LD_VX_DT = 26  # Fx07
    LD_KEY = 27    # Fx0A
    LD_DT_VX = 28  # Fx15
    LD_ST_VX = 29  # Fx18
    ADD_I = 30     # Fx1E
    LD_FONT = 31   # Fx29
    LD_BCD = 32    # Fx33
    STORE = 33     # Fx55
    LOAD = 34      # Fx65
    UNKNOWN = 35


# (mask, pattern, op); earlier entries win, so 00E0/00EE precede 0nnn.
OPCODE_PATTERNS = (
    (0xFFFF, 0x00E0, Op.CLS),
    (0xFFFF, 0x00EE, Op.RET),
    (0xF000, 0x0000, Op.SYS),
    (0xF000, 0x1000, Op.JP),
    (0xF000, 0x2000, Op.CALL),
    (0xF000, 0x3000, Op.SE_BYTE),
    (0xF000, 0x4000, Op.SNE_BYTE),
    (0xF00F, 0x5000, Op.SE_REG),
    (0xF000, 0x6000, Op.LD_BYTE),
    (0xF000, 0x7000, Op.ADD_BYTE),
    (0xF00F, 0x8000, Op.LD_REG),
    (0xF00F, 0x8001, Op.OR),
    (0xF00F, 0x8002, Op.AND),
    (0xF00F, 0x8003, Op.XOR),
    (0xF00F, 0x8004, Op.ADD_REG),
    (0xF00F, 0x8005, Op.SUB),
    (0xF00F, 0x8006, Op.SHR),
    (0xF00F, 0x8007, Op.SUBN),
    (0xF00F, 0x800E, Op.SHL),
    (0xF00F, 0x9000, Op.SNE_REG),
    (0xF000, 0xA000, Op.LD_I),
    (0xF000, 0xB000, Op.JP_V0),
    (0xF000, 0xC000, Op.RND),
    (0xF000, 0xD000, Op.DRW),
    (0xF0FF, 0xE09E, Op.SKP),
    (0xF0FF, 0xE0A1, Op.SKNP),
    (0xF0FF, 0xF007, Op.LD_VX_DT),
    (0xF0FF, 0xF00A, Op.LD_KEY),
    (0xF0FF, 0xF015, Op.LD_DT_VX),
    (0xF0FF, 0xF018, Op.LD_ST_VX),
    (0xF0FF, 0xF01E, Op.ADD_I),
    (0xF0FF, 0xF029, Op.LD_FONT),
    (0xF0FF, 0xF033, Op.LD_BCD),
    (0xF0FF, 0xF055, Op.STORE),
    (0xF0FF, 0xF065, Op.LOAD),
)

MNEMONICS = {
    Op.SYS: "SYS 0x{nnn:03X}",
    Op.CLS: "CLS",
    Op.RET: "RET",
    Op.JP: "JP 0x{nnn:03X}",
    Op.CALL: "CALL 0x{nnn:03X}",
    Op.SE_BYTE: "SE V{x:X}, 0x{nn:02X}",
    Op.SNE_BYTE: "SNE V{x:X}, 0x{nn:02X}",
    Op.SE_REG: "SE V{x:X}, V{y:X}",
    Op.LD_BYTE: "LD V{x:X}, 0x{nn:02X}",
    Op.ADD_BYTE: "ADD V{x:X}, 0x{nn:02X}",
    Op.LD_REG: "LD V{x:X}, V{y:X}",
    Op.OR: "OR V{x:X}, V{y:X}",
    Op.AND: "AND V{x:X}, V{y:X}",
    Op.XOR: "XOR V{x:X}, V{y:X}",
    Op.ADD_REG: "ADD V{x:X}, V{y:X}",
    Op.SUB: "SUB V{x:X}, V{y:X}",
    Op.SHR: "SHR V{x:X}, V{y:X}",
    Op.SUBN: "SUBN V{x:X}, V{y:X}",
    Op.SHL: "SHL V{x:X}, V{y:X}",
    Op.SNE_REG: "SNE V{x:X}, V{y:X}",
    Op.LD_I: "LD I, 0x{nnn:03X}",
    Op.JP_V0: "JP V0, 0x{nnn:03X}",
    Op.RND: "RND V{x:X}, 0x{nn:02X}",
    Op.DRW: "DRW V{x:X}, V{y:X}, {n}",
    Op.SKP: "SKP V{x:X}",
    Op.SKNP: "SKNP V{x:X}",
    Op.LD_VX_DT: "LD V{x:X}, DT",
    Op.LD_KEY: "LD V{x:X}, K",
    Op.LD_DT_VX: "LD DT, V{x:X}",
    Op.LD_ST_VX: "LD ST, V{x:X}",
    Op.ADD_I: "ADD I, V{x:X}",
    Op.LD_FONT: "LD F, V{x:X}",
    Op.LD_BCD: "LD B, V{x:X}",
    Op.STORE: "LD [I], V{x:X}",
    Op.LOAD: "LD V{x:X}, [I]",
    Op.UNKNOWN: "??? 0x{raw:04X}",
}


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    op: int      # Op tag
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)
    address: int = 0  # Where the instruction was fetched from


def classify(instruction) -> jnp.ndarray:
    """Map a 16-bit instruction to its Op tag, UNKNOWN if nothing matches."""
    op = jnp.asarray(int(Op.UNKNOWN), dtype=jnp.int32)
    for mask, pattern, kind in reversed(OPCODE_PATTERNS):
        op = jnp.where((instruction & mask) == pattern, int(kind), op)
    return op


def decode(instruction: int, address: int = 0) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    return DecodedInstruction(
        raw=instruction,
        op=classify(instruction),
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF,
        address=address,
    )


def disassemble(instruction: int) -> str:
    """Render a concrete instruction as an assembly mnemonic, e.g. ``LD V1, 0x05``."""
    instruction = int(instruction)
    op = Op(int(classify(instruction)))
    return MNEMONICS[op].format(
        raw=instruction,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF,
    )
