"""
Cross-file relationship detection.
Builds the graph the grouping strategies walk: import edges, same-directory
sibling edges and content-similarity edges.
"""

import logging
from collections import Counter
from typing import Callable, Dict, FrozenSet, List, Optional, Set

from .models import File, FileRelationship, RelationshipGraph, RelationshipType
from .text_utils import calculate_text_relevance, directory_of, group_files_by_directory, semantic_text

logger = logging.getLogger(__name__)


class RelationshipDetector:
    """
    Detects relationships between in-memory files.

    Edge order follows the input order of `files`, so two calls on the same
    input produce the same edge list.
    """

    IMPORT_STRENGTH = 0.9
    SIBLING_STRENGTH = 0.5
    SEMANTIC_THRESHOLD = 0.3
    SEMANTIC_CONTENT_CHARS = 500

    def __init__(self,
                 text_relevance: Callable[[str, str], float] = calculate_text_relevance,
                 directory_grouper: Callable[[List[File]], Dict[str, List[File]]] = group_files_by_directory,
                 semantic_threshold: Optional[float] = None):
        self.text_relevance = text_relevance
        self.directory_grouper = directory_grouper
        self.semantic_threshold = self.SEMANTIC_THRESHOLD if semantic_threshold is None else semantic_threshold

    def detect(self, files: List[File]) -> RelationshipGraph:
        nodes = {file.id: file for file in files}
        edges: List[FileRelationship] = []

        edges.extend(self._detect_import_edges(files))
        edges.extend(self._detect_sibling_edges(files))

        # Any existing edge between a pair rules out a semantic one
        connected: Set[FrozenSet[str]] = {
            frozenset((e.source_file_id, e.target_file_id)) for e in edges
        }
        edges.extend(self._detect_semantic_edges(files, connected))

        if logger.isEnabledFor(logging.DEBUG):
            counts = Counter(e.type.value for e in edges)
            logger.debug(f"Detected {len(edges)} relationships across {len(files)} files: {dict(counts)}")

        return RelationshipGraph(nodes=nodes, edges=edges)

    def _detect_import_edges(self, files: List[File]) -> List[FileRelationship]:
        edges = []

        for file in files:
            for imp in file.imports or []:
                if not imp.source:
                    continue
                target = self._resolve_import(imp.source, files)
                if target is None:
                    continue
                edges.append(FileRelationship(
                    source_file_id=file.id,
                    target_file_id=target.id,
                    type=RelationshipType.IMPORTS,
                    strength=self.IMPORT_STRENGTH,
                    metadata={"importPath": imp.source}
                ))

        return edges

    @staticmethod
    def _resolve_import(source: str, files: List[File]) -> Optional[File]:
        """First file whose path ends with, or contains, the import source."""
        stripped = source.replace('./', '')
        for candidate in files:
            if candidate.path.endswith(source) or stripped in candidate.path:
                return candidate
        return None

    def _detect_sibling_edges(self, files: List[File]) -> List[FileRelationship]:
        edges = []

        for dir_files in self.directory_grouper(files).values():
            if len(dir_files) < 2:
                continue
            for i, file1 in enumerate(dir_files):
                for file2 in dir_files[i + 1:]:
                    edges.append(FileRelationship(
                        source_file_id=file1.id,
                        target_file_id=file2.id,
                        type=RelationshipType.SIBLING,
                        strength=self.SIBLING_STRENGTH,
                        metadata={"directory": directory_of(file1.path)}
                    ))

        return edges

    def _detect_semantic_edges(self, files: List[File],
                               connected: Set[FrozenSet[str]]) -> List[FileRelationship]:
        # O(n^2) similarity calls; texts are built once per file
        texts = [semantic_text(f, self.SEMANTIC_CONTENT_CHARS) for f in files]
        edges = []

        for i, file1 in enumerate(files):
            for j in range(i + 1, len(files)):
                file2 = files[j]
                if frozenset((file1.id, file2.id)) in connected:
                    continue

                similarity = self.text_relevance(texts[i], texts[j])
                if similarity > self.semantic_threshold:
                    edges.append(FileRelationship(
                        source_file_id=file1.id,
                        target_file_id=file2.id,
                        type=RelationshipType.SEMANTIC,
                        strength=similarity,
                        metadata={"similarity": similarity}
                    ))

        return edges


def detect_file_relationships(files: List[File]) -> RelationshipGraph:
    """Build the relationship graph for `files` with the default collaborators."""
    return RelationshipDetector().detect(files)
