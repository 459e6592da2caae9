"""Contains the version of dbmatic, this file is parsed by setup.py so the version must stay on line two."""
__version__ = "0.1.0"
