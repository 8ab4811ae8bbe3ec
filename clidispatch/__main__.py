"""
`python -m clidispatch`: the bare dispatcher, with only the built-in commands.
"""
import sys

from .dispatch import Dispatcher

if __name__ == "__main__":
    __prog__ = "clidispatch"
    sys.exit(Dispatcher().run())
