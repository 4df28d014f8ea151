"""
Module for working with MythicMobs configuration.

Provides the catalog service and its components: document discovery and
parsing, the skill-line grammar, per-category extractors, template
inheritance, the TTL cache, partial rewriting and YAML validation.
"""

from .service import MythicCatalogService
from .models import (
    Category,
    RawConfig,
    RawDocument,
    DOCUMENT_EXTENSIONS,
    EQUIPMENT_SLOTS,
    MAX_TEMPLATE_DEPTH,
)
from .errors import CatalogError, DocumentParseError, EntityNotFoundError, WriteFailure
from .loaders import DocumentStore
from .skill_parser import SkillStringParser
from .inheritance import TemplateResolver
from .cache import EntityCache
from .writer import ConfigWriter
from .validator import ConfigValidator

# Public exports
__all__ = [
    # Main service
    "MythicCatalogService",
    # Types and constants
    "Category",
    "RawConfig",
    "RawDocument",
    "DOCUMENT_EXTENSIONS",
    "EQUIPMENT_SLOTS",
    "MAX_TEMPLATE_DEPTH",
    # Errors
    "CatalogError",
    "DocumentParseError",
    "EntityNotFoundError",
    "WriteFailure",
    # Component classes (for advanced usage)
    "DocumentStore",
    "SkillStringParser",
    "TemplateResolver",
    "EntityCache",
    "ConfigWriter",
    "ConfigValidator",
]
