import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Dict, Any

from .errors import ErrorFactory


def now_ms() -> int:
    return int(time.time() * 1000)


class RelationshipType(Enum):
    """Kinds of edges in the relationship graph."""
    IMPORTS = "imports"
    EXPORTS = "exports"
    SIBLING = "sibling"
    SEMANTIC = "semantic"


class GroupingStrategy(Enum):
    """Clustering policies understood by the grouping engine."""
    IMPORTS = "imports"
    DIRECTORY = "directory"
    SEMANTIC = "semantic"
    MIXED = "mixed"

    @classmethod
    def parse(cls, value) -> "GroupingStrategy":
        """Resolve an enum member or its string value, failing fast otherwise."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ErrorFactory.unknown_strategy(value) from None


@dataclass
class FileImport:
    source: str


@dataclass
class File:
    """A project file as handed to the engine. Identity is `id`."""
    id: str
    path: str
    name: str
    content: Optional[str] = None
    summary: Optional[str] = None
    imports: Optional[List[FileImport]] = None
    exports: Optional[List[Any]] = None
    created_at: Optional[int] = None   # unix ms
    updated_at: Optional[int] = None   # unix ms


@dataclass
class FileRelationship:
    source_file_id: str
    target_file_id: str
    type: RelationshipType
    strength: float                   # 0.0 to 1.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    def touches(self, file_id: str) -> bool:
        return self.source_file_id == file_id or self.target_file_id == file_id

    def other_end(self, file_id: str) -> str:
        """The endpoint opposite to `file_id`; edges are walked as undirected."""
        return self.target_file_id if self.source_file_id == file_id else self.source_file_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sourceFileId": self.source_file_id,
            "targetFileId": self.target_file_id,
            "type": self.type.value,
            "strength": self.strength,
            "metadata": dict(self.metadata),
        }


@dataclass
class GroupMetadata:
    directory: Optional[str] = None
    primary_file: Optional[str] = None
    semantic_category: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        data = {}
        if self.directory is not None:
            data["directory"] = self.directory
        if self.primary_file is not None:
            data["primaryFile"] = self.primary_file
        if self.semantic_category is not None:
            data["semanticCategory"] = self.semantic_category
        return data


@dataclass
class FileGroup:
    id: str
    name: str
    strategy: GroupingStrategy
    file_ids: List[str]
    priority: float
    project_id: int
    relationships: List[FileRelationship] = field(default_factory=list)
    estimated_tokens: Optional[int] = None  # set by the token budget optimizer
    metadata: GroupMetadata = field(default_factory=GroupMetadata)
    created_at: int = field(default_factory=now_ms)
    updated_at: Optional[int] = None

    def __post_init__(self):
        # A new group is created and updated at the same instant
        if self.updated_at is None:
            self.updated_at = self.created_at

    @property
    def size(self) -> int:
        return len(self.file_ids)

    def to_dict(self) -> Dict[str, Any]:
        """Camel-cased wire shape of the group."""
        return {
            "id": self.id,
            "name": self.name,
            "strategy": self.strategy.value,
            "fileIds": list(self.file_ids),
            "priority": self.priority,
            "projectId": self.project_id,
            "relationships": [r.to_dict() for r in self.relationships],
            "estimatedTokens": self.estimated_tokens,
            "metadata": self.metadata.to_dict(),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class RelationshipGraph:
    nodes: Dict[str, File]
    edges: List[FileRelationship]

    def edges_for(self, file_id: str) -> List[FileRelationship]:
        return [e for e in self.edges if e.touches(file_id)]

    def edges_of_type(self, rel_type: RelationshipType, min_strength: float = 0.0) -> List[FileRelationship]:
        return [e for e in self.edges if e.type == rel_type and e.strength >= min_strength]


@dataclass
class GroupingOptions:
    max_group_size: int = 10
    min_relationship_strength: float = 0.3
    priority_threshold: float = 3
