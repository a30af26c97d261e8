"""Share files, then see who opened them."""

__version__ = "0.1.0"
