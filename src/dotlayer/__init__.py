"""dotlayer: link layered dotfile trees into a home directory."""

__version__ = "0.3.0"
