"""Schema Resolver for dynamic discovery of configuration-module schemas."""

import importlib.util
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Protocol

from ..utils.path_utils import module_name_for, resolve_directory
from .contracts import EnvValidationHook, LoadedSchemasPayload, ResolvedFilesPayload
from .errors import FilesystemError, ModuleLoadError
from .hooks import HookRegistry
from .registry import ConfigFileFilters, ResolutionPaths
from .schemas import as_schema

DEFAULT_SCHEMA_EXPORT = "validation_schema"


@dataclass(frozen=True)
class DiscoveredSchema:
    """A schema together with the file that exported it."""
    schema: Any
    source: Path


class SchemaProvider(Protocol):
    """IO capability behind discovery: list a directory, load one module."""

    def list_files(self, directory: Path) -> List[str]:
        ...

    def load_schema(self, file_path: Path) -> Optional[Any]:
        ...


class FilesystemSchemaProvider:
    """Reads directories with ``os.listdir`` and executes modules with importlib."""

    def __init__(self, schema_export: str = DEFAULT_SCHEMA_EXPORT):
        self.schema_export = schema_export
        self.logger = logging.getLogger(__name__)

    def list_files(self, directory: Path) -> List[str]:
        """List immediate entries of ``directory``, sorted by name.

        Raises:
            FilesystemError: If the directory is missing or unreadable
        """
        try:
            return sorted(os.listdir(directory))
        except OSError as e:
            raise FilesystemError(directory, e.strerror or str(e)) from e

    def _load_module(self, file_path: Path):
        module_name = module_name_for(file_path)
        spec = importlib.util.spec_from_file_location(module_name, file_path)
        if spec is None or spec.loader is None:
            raise ModuleLoadError(file_path, "no loader available for this file type")

        module = importlib.util.module_from_spec(spec)
        # registered while executing so pydantic can resolve the module namespace
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            raise ModuleLoadError(file_path, f"{type(e).__name__}: {e}") from e
        finally:
            sys.modules.pop(module_name, None)
        return module

    def load_schema(self, file_path: Path) -> Optional[Any]:
        """Execute a configuration module and return its exported schema.

        Args:
            file_path: Absolute path of the configuration module

        Returns:
            The schema, or None if the module exports none

        Raises:
            ModuleLoadError: If the module cannot be executed or its export
                is not a schema
        """
        module = self._load_module(file_path)
        try:
            return as_schema(getattr(module, self.schema_export, None))
        except TypeError as e:
            raise ModuleLoadError(file_path, str(e)) from e


class SchemaResolver:
    """Walks the resolution paths and collects every exported schema."""

    def __init__(self, resolution_paths: ResolutionPaths, config_file_filters: ConfigFileFilters,
                 hooks: HookRegistry, provider: Optional[SchemaProvider] = None):
        self.resolution_paths = resolution_paths
        self.config_file_filters = config_file_filters
        self.hooks = hooks
        self.provider = provider or FilesystemSchemaProvider()
        self.logger = logging.getLogger(__name__)

    def _resolve_path(self, path) -> List[DiscoveredSchema]:
        cwd = resolve_directory(path)
        config_files = [f for f in self.provider.list_files(cwd)
                        if self.config_file_filters.matches(f)]
        self.logger.debug(f"Resolved {len(config_files)} config file(s) in {cwd}: {config_files}")

        self.hooks.trigger(
            EnvValidationHook.CONFIGURATION_RESOLVED_FILES,
            ResolvedFilesPayload(files=list(config_files), path=cwd),
        )

        discovered = []
        for filename in config_files:
            file_path = cwd / filename
            schema = self.provider.load_schema(file_path)
            if schema is None:
                self.logger.debug(f"No schema exported by {file_path}")
                continue
            discovered.append(DiscoveredSchema(schema=schema, source=file_path))

        self.hooks.trigger(
            EnvValidationHook.CONFIGURATION_LOADED_SCHEMAS,
            LoadedSchemasPayload(schemas=[d.schema for d in discovered], path=cwd),
        )
        return discovered

    def resolve(self) -> List[DiscoveredSchema]:
        """Discover schemas across all resolution paths.

        Returns:
            Schemas in resolution-path order, then filename order

        Raises:
            FilesystemError: A resolution path cannot be listed
            ModuleLoadError: A configuration module failed to load
        """
        schemas: List[DiscoveredSchema] = []
        for path in self.resolution_paths:
            schemas.extend(self._resolve_path(path))
        self.logger.debug(f"Resolved {len(schemas)} schema(s) from {len(self.resolution_paths)} path(s)")
        return schemas


__all__ = [
    'DiscoveredSchema', 'SchemaProvider', 'FilesystemSchemaProvider',
    'SchemaResolver', 'DEFAULT_SCHEMA_EXPORT',
]
