"""Fatal conditions raised by the CHIP-8 run loop."""


class Chip8Error(Exception):
    """Base class for conditions that stop the interpreter."""


class FetchOutOfBoundsError(Chip8Error):
    """Opcode fetch past the end of memory."""

    def __init__(self, address: int):
        self.address = address
        super().__init__(f"Opcode fetch out of bounds at 0x{address:04X}")


class StackOverflowError(Chip8Error):
    """Subroutine call with all 16 stack slots in use."""

    def __init__(self, address: int):
        self.address = address
        super().__init__(f"Stack overflow on call near 0x{address:04X}")


class StackUnderflowError(Chip8Error):
    """Return with an empty stack."""

    def __init__(self, address: int):
        self.address = address
        super().__init__(f"Stack underflow on return near 0x{address:04X}")


class RomTooLargeError(Chip8Error, ValueError):
    """Program image does not fit between 0x200 and the end of memory."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"ROM is {size} bytes, at most {limit} bytes fit in program memory")
