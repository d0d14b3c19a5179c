"""orgctl — organization tree editor and budget/headcount roll-up."""

__version__ = "0.3.0"
