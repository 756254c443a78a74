"""Caulker package root."""

import logging

from caulker.exceptions import CaulkerError, NeverThrown
from caulker.invariants import never

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = ["__version__", "CaulkerError", "NeverThrown", "never"]

__version__ = "0.1.0"
