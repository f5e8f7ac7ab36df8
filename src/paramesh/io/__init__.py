"""Mesh export (and STL import) for paramesh."""

from .dxf import write_dxf
from .stl import read_stl, write_stl

__all__ = ['write_stl', 'read_stl', 'write_dxf']
