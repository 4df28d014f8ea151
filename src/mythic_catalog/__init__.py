"""
mythic-catalog: typed catalogs over MythicMobs configuration

Reads the YAML configuration tree of the MythicMobs plugin (mobs, items,
drop tables, skill groups) into queryable, cached catalogs and writes
single entities back to their documents.
"""

__version__ = "0.1.0"
__author__ = "mythic-catalog Contributors"

# Core service imports
from .catalog import MythicCatalogService
from .utils.logging_config import setup_logging

# Main data models
from .catalog.models import (
    Category, MobDefinition, MobDetail, ItemDefinition, ItemDetail,
    DropTable, SkillGroupDefinition, ParsedSkill, CatalogStatus
)

__all__ = [
    # Services
    'MythicCatalogService',

    # Logging
    'setup_logging',

    # Data models
    'Category',
    'MobDefinition',
    'MobDetail',
    'ItemDefinition',
    'ItemDetail',
    'DropTable',
    'SkillGroupDefinition',
    'ParsedSkill',
    'CatalogStatus',
]
