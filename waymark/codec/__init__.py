"""Compact geometry codecs."""

from .polyline import decode, encode

__all__ = ["decode", "encode"]
