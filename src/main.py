"""Entry point for the alchemy effects randomizer.

Loads a JSON record database, redistributes ingredient effects and writes the
patch plugin plus a change log.
"""
import sys

from alchemy.cli import main

if __name__ == "__main__":
    sys.exit(main())
