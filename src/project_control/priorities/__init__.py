"""Priorities document parsing, editing and rendering."""

from .model import Document, Entry, Section, Subsection
from .parser import parse_priorities
from .serializer import serialize_priorities

__all__ = ["Document", "Entry", "Section", "Subsection", "parse_priorities", "serialize_priorities"]
