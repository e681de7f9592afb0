"""podcatalog - browse a podcast show's episode catalog from the terminal."""

__version__ = "0.1.0"
