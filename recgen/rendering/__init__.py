"""Rendering of generated type models into Python source."""

from .builder import LAYOUTS, RenderedSource, SourceRenderer, module_for, path_for

__all__ = ["LAYOUTS", "RenderedSource", "SourceRenderer", "module_for", "path_for"]
