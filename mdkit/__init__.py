"""Mega Drive tools: ESF to VGM conversion, EIF to TFI instrument conversion and ROM header generation."""

__version__ = "1.0.0"