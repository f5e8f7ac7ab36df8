# -*- coding: utf-8 -*-
"""Parametric curve, surface and primitive mesh generation."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("paramesh")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"
