"""Shared helpers."""

from .path_utils import resolve_directory, generate_slug, module_name_for

__all__ = ['resolve_directory', 'generate_slug', 'module_name_for']
