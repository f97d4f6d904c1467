"""
Grouping strategies that partition a project's files into context groups.

Every relationship-based strategy follows the same shape: seeds are visited
in a strategy-specific order, each unclaimed seed grows a cluster along
qualifying edges (first claim wins), clusters that found no partner are
dropped, and whatever was never claimed ends up in a singleton group. The
seed order is therefore part of each strategy's contract.
"""

import logging
from dataclasses import fields
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Union

from .errors import ErrorFactory
from .importance_scorer import FileImportance, get_file_category, get_file_importance
from .models import (
    File, FileGroup, FileRelationship, GroupMetadata, GroupingOptions, GroupingStrategy,
    RelationshipType
)
from .relationship_detector import RelationshipDetector
from .text_utils import group_files_by_directory

logger = logging.getLogger(__name__)

OptionsLike = Union[GroupingOptions, Mapping[str, Any], None]

# Tie-break used by the mixed strategy when ordering a seed's edges
TYPE_PRIORITY = {
    RelationshipType.IMPORTS: 3,
    RelationshipType.EXPORTS: 2,
    RelationshipType.SIBLING: 1,
    RelationshipType.SEMANTIC: 0,
}

_OPTION_ALIASES = {
    'maxGroupSize': 'max_group_size',
    'minRelationshipStrength': 'min_relationship_strength',
    'priorityThreshold': 'priority_threshold',
}


class GroupingEngine:
    """Dispatches a grouping request to one of the four strategies."""

    def __init__(self,
                 importance: Callable[[File], FileImportance] = get_file_importance,
                 categorize: Callable[[File], str] = get_file_category,
                 detector: Optional[RelationshipDetector] = None,
                 directory_grouper: Callable[[List[File]], Dict[str, List[File]]] = group_files_by_directory):
        self.importance = importance
        self.categorize = categorize
        self.detector = detector or RelationshipDetector(directory_grouper=directory_grouper)
        self.directory_grouper = directory_grouper

    def group(self, files: List[File], strategy: Union[GroupingStrategy, str],
              project_id: int, options: OptionsLike = None) -> List[FileGroup]:
        strategy = GroupingStrategy.parse(strategy)
        opts = resolve_options(options)

        handlers = {
            GroupingStrategy.IMPORTS: self._group_by_imports,
            GroupingStrategy.DIRECTORY: self._group_by_directory,
            GroupingStrategy.SEMANTIC: self._group_by_semantic,
            GroupingStrategy.MIXED: self._group_by_mixed,
        }
        groups = handlers[strategy](files, opts, project_id)

        logger.info(f"Grouped {len(files)} files into {len(groups)} groups using '{strategy.value}' strategy")
        return groups

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    def _group_by_imports(self, files: List[File], opts: GroupingOptions,
                          project_id: int) -> List[FileGroup]:
        graph = self.detector.detect(files)
        scores = self._importance_scores(files)
        adjacency = _adjacency(graph.edges_of_type(RelationshipType.IMPORTS, opts.min_relationship_strength))

        groups: List[FileGroup] = []
        assigned: Set[str] = set()

        for file in files:
            if file.id in assigned:
                continue

            assigned.add(file.id)
            group = FileGroup(
                id=f"import-group-{len(groups) + 1}",
                name=f"Import cluster around {file.name}",
                strategy=GroupingStrategy.IMPORTS,
                file_ids=[file.id],
                priority=scores[file.id],
                project_id=project_id,
                metadata=GroupMetadata(primary_file=file.id)
            )

            # Stack walk over import edges in both directions
            to_process = [file.id]
            processed: Set[str] = set()

            while to_process and group.size < opts.max_group_size:
                current_id = to_process.pop()
                if current_id in processed:
                    continue
                processed.add(current_id)

                for edge in adjacency.get(current_id, []):
                    other_id = edge.other_end(current_id)
                    if other_id not in assigned and group.size < opts.max_group_size:
                        group.file_ids.append(other_id)
                        group.relationships.append(edge)
                        assigned.add(other_id)
                        to_process.append(other_id)

            self._keep_cluster(group, groups, assigned, file.id)

        groups.extend(self._singletons(
            files, assigned, GroupingStrategy.IMPORTS, project_id, scores, id_prefix='import-single'
        ))
        return groups

    def _group_by_directory(self, files: List[File], opts: GroupingOptions, project_id: int,
                            scores: Optional[Dict[str, float]] = None) -> List[FileGroup]:
        if scores is None:
            scores = self._importance_scores(files)

        groups: List[FileGroup] = []
        group_index = 0

        for directory, dir_files in self.directory_grouper(files).items():
            # Split large directories into consecutive chunks
            for start in range(0, len(dir_files), opts.max_group_size):
                chunk = dir_files[start:start + opts.max_group_size]
                avg_priority = sum(scores[f.id] for f in chunk) / len(chunk)
                group_index += 1

                groups.append(FileGroup(
                    id=f"dir-group-{group_index}",
                    name=f"{directory or 'Root'} ({len(chunk)} files)",
                    strategy=GroupingStrategy.DIRECTORY,
                    file_ids=[f.id for f in chunk],
                    priority=avg_priority,
                    project_id=project_id,
                    metadata=GroupMetadata(directory=directory)
                ))

        return groups

    def _group_by_semantic(self, files: List[File], opts: GroupingOptions,
                           project_id: int) -> List[FileGroup]:
        graph = self.detector.detect(files)
        scores = self._importance_scores(files)
        semantic_edges = graph.edges_of_type(RelationshipType.SEMANTIC, opts.min_relationship_strength)

        groups: List[FileGroup] = []
        assigned: Set[str] = set()

        for file in self._by_importance(files, scores):
            if file.id in assigned:
                continue

            assigned.add(file.id)
            category = self.categorize(file)
            group = FileGroup(
                id=f"semantic-group-{len(groups) + 1}",
                name=f"Semantic cluster: {category}",
                strategy=GroupingStrategy.SEMANTIC,
                file_ids=[file.id],
                priority=scores[file.id],
                project_id=project_id,
                metadata=GroupMetadata(semantic_category=category)
            )

            similar = sorted(
                (e for e in semantic_edges if e.touches(file.id)),
                key=lambda e: e.strength,
                reverse=True
            )
            for edge in similar:
                if group.size >= opts.max_group_size:
                    break
                other_id = edge.other_end(file.id)
                if other_id not in assigned:
                    group.file_ids.append(other_id)
                    group.relationships.append(edge)
                    assigned.add(other_id)

            self._keep_cluster(group, groups, assigned, file.id)

        groups.extend(self._singletons(
            files, assigned, GroupingStrategy.SEMANTIC, project_id, scores,
            id_prefix='semantic-single', with_category=True
        ))
        return groups

    def _group_by_mixed(self, files: List[File], opts: GroupingOptions,
                        project_id: int) -> List[FileGroup]:
        graph = self.detector.detect(files)
        scores = self._importance_scores(files)

        groups: List[FileGroup] = []
        assigned: Set[str] = set()

        for file in self._by_importance(files, scores):
            if file.id in assigned:
                continue
            # Seeds are sorted, so nothing after this one can qualify
            if scores[file.id] < opts.priority_threshold:
                break

            assigned.add(file.id)
            group = FileGroup(
                id=f"mixed-group-{len(groups) + 1}",
                name=f"Mixed cluster: {file.name}",
                strategy=GroupingStrategy.MIXED,
                file_ids=[file.id],
                priority=scores[file.id],
                project_id=project_id,
                metadata=GroupMetadata(primary_file=file.id)
            )

            file_edges = sorted(
                (e for e in graph.edges_for(file.id) if e.strength >= opts.min_relationship_strength),
                key=lambda e: (-TYPE_PRIORITY.get(e.type, 0), -e.strength)
            )
            for edge in file_edges:
                if group.size >= opts.max_group_size:
                    break
                other_id = edge.other_end(file.id)
                if other_id not in assigned:
                    group.file_ids.append(other_id)
                    group.relationships.append(edge)
                    assigned.add(other_id)

            self._keep_cluster(group, groups, assigned, file.id)

        remaining = [f for f in files if f.id not in assigned]
        if remaining:
            for dir_group in self._group_by_directory(remaining, opts, project_id, scores):
                dir_group.id = dir_group.id.replace('dir-', 'mixed-dir-', 1)
                dir_group.strategy = GroupingStrategy.MIXED
                groups.append(dir_group)

        return groups

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _importance_scores(self, files: List[File]) -> Dict[str, float]:
        return {file.id: self.importance(file).score for file in files}

    @staticmethod
    def _by_importance(files: List[File], scores: Dict[str, float]) -> List[File]:
        # Stable: equal scores keep input order
        return sorted(files, key=lambda f: scores[f.id], reverse=True)

    @staticmethod
    def _keep_cluster(group: FileGroup, groups: List[FileGroup], assigned: Set[str], seed_id: str) -> None:
        """A cluster needs at least one qualifying relationship to exist."""
        if group.size > 1:
            groups.append(group)
        else:
            assigned.discard(seed_id)

    def _singletons(self, files: List[File], assigned: Set[str], strategy: GroupingStrategy,
                    project_id: int, scores: Dict[str, float], id_prefix: str,
                    with_category: bool = False) -> List[FileGroup]:
        singles = []
        for file in files:
            if file.id in assigned:
                continue
            assigned.add(file.id)
            metadata = GroupMetadata(semantic_category=self.categorize(file)) if with_category else GroupMetadata()
            singles.append(FileGroup(
                id=f"{id_prefix}-{file.id}",
                name=file.name,
                strategy=strategy,
                file_ids=[file.id],
                priority=scores[file.id],
                project_id=project_id,
                metadata=metadata
            ))
        return singles


def _adjacency(edges: List[FileRelationship]) -> Dict[str, List[FileRelationship]]:
    """Incident edges per file id, in edge order, treating edges as undirected."""
    adjacency: Dict[str, List[FileRelationship]] = {}
    for edge in edges:
        adjacency.setdefault(edge.source_file_id, []).append(edge)
        if edge.target_file_id != edge.source_file_id:
            adjacency.setdefault(edge.target_file_id, []).append(edge)
    return adjacency


def resolve_options(options: OptionsLike) -> GroupingOptions:
    """Normalize caller options (dataclass, snake_case or camelCase mapping) and validate them."""
    if options is None:
        opts = GroupingOptions()
    elif isinstance(options, GroupingOptions):
        opts = options
    else:
        known = {f.name for f in fields(GroupingOptions)}
        values = {}
        for key, value in options.items():
            key = _OPTION_ALIASES.get(key, key)
            if key in known and value is not None:
                values[key] = value
        opts = GroupingOptions(**values)

    max_size = opts.max_group_size
    if isinstance(max_size, bool) or not isinstance(max_size, int) or max_size < 1:
        raise ErrorFactory.invalid_param('max_group_size', 'integer >= 1', max_size)

    strength = opts.min_relationship_strength
    if isinstance(strength, bool) or not isinstance(strength, (int, float)) or not 0 <= strength <= 1:
        raise ErrorFactory.invalid_param('min_relationship_strength', 'number in [0, 1]', strength)

    threshold = opts.priority_threshold
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        raise ErrorFactory.invalid_param('priority_threshold', 'number', threshold)

    return opts


def group_files_by_strategy(files: List[File], strategy: Union[GroupingStrategy, str],
                            project_id: int, options: OptionsLike = None) -> List[FileGroup]:
    """Partition `files` into groups using the default collaborators."""
    return GroupingEngine().group(files, strategy, project_id, options)
