"""
Run a CHIP-8 ROM: python main.py -f path/to/rom.ch8 [--debug] [--headless N]
"""

import sys

from chipax.cli import main

if __name__ == "__main__":
    sys.exit(main())
