"""GroupWeaver: relationship-aware file grouping for LLM context windows."""

from .__version__ import __version__
from .core import (
    File, FileImport, FileGroup, FileRelationship, GroupingOptions, GroupingStrategy,
    RelationshipType, ApiError, detect_file_relationships, group_files_by_strategy,
    optimize_groups_for_token_limit
)

__all__ = ['__version__', 'File', 'FileImport', 'FileGroup', 'FileRelationship',
           'GroupingOptions', 'GroupingStrategy', 'RelationshipType', 'ApiError',
           'detect_file_relationships', 'group_files_by_strategy', 'optimize_groups_for_token_limit']
