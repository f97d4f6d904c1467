from .models import (
    File, FileImport, FileGroup, FileRelationship, GroupMetadata, GroupingOptions,
    GroupingStrategy, RelationshipGraph, RelationshipType
)
from .errors import ApiError, ConfigError, ErrorFactory
from .relationship_detector import RelationshipDetector, detect_file_relationships
from .grouping_engine import GroupingEngine, group_files_by_strategy
from .token_budget import TokenBudgetOptimizer, optimize_groups_for_token_limit
from .tokenizer import TokenEstimator, HeuristicTokenEstimator

__all__ = ['File', 'FileImport', 'FileGroup', 'FileRelationship', 'GroupMetadata', 'GroupingOptions',
           'GroupingStrategy', 'RelationshipGraph', 'RelationshipType',
           'ApiError', 'ConfigError', 'ErrorFactory',
           'RelationshipDetector', 'detect_file_relationships',
           'GroupingEngine', 'group_files_by_strategy',
           'TokenBudgetOptimizer', 'optimize_groups_for_token_limit',
           'TokenEstimator', 'HeuristicTokenEstimator']
