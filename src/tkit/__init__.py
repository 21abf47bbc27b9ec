"""
tkit -- a customizable tool manager.

Keeps a registry of tools with their install, remove, update and run
commands, and mirrors that registry to a GitHub repository so the same
toolbox follows you to every machine.
"""

__version__ = "0.1.1"
__author__ = "tkit contributors"

CONFIG_DIR_ENV = "TKIT_CONFIG_DIR"
