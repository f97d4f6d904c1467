"""
JSON serialization utilities for GroupWeaver.
Handles enums, dataclasses, sets and Path objects found in engine results.
"""

import json
import datetime
from pathlib import Path
from enum import Enum
from dataclasses import is_dataclass, asdict
from typing import Any, Dict, List

from .models import FileGroup, FileRelationship, RelationshipGraph


class GroupWeaverJSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for GroupWeaver data types."""

    def default(self, obj: Any) -> Any:
        # Models that know their own wire shape
        if isinstance(obj, (FileGroup, FileRelationship)):
            return obj.to_dict()

        if isinstance(obj, Enum):
            return obj.value

        if isinstance(obj, Path):
            return str(obj)

        if isinstance(obj, datetime.datetime):
            return obj.isoformat()

        if is_dataclass(obj) and not isinstance(obj, type):
            return asdict(obj)

        if isinstance(obj, (set, frozenset)):
            return sorted(obj) if all(isinstance(x, str) for x in obj) else list(obj)

        return super().default(obj)


def safe_json_dumps(obj: Any, **kwargs) -> str:
    """
    Serialize an object to a JSON string with GroupWeaverJSONEncoder.
    """
    return json.dumps(obj, cls=GroupWeaverJSONEncoder, **kwargs)


def serialize_groups(groups: List[FileGroup]) -> List[Dict[str, Any]]:
    return [group.to_dict() for group in groups]


def serialize_graph(graph: RelationshipGraph) -> Dict[str, Any]:
    """Node ids plus the edge list; file bodies are left out."""
    return {
        "nodes": list(graph.nodes.keys()),
        "edges": [edge.to_dict() for edge in graph.edges],
    }
