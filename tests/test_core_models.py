import json
import datetime
from pathlib import Path

import pytest

from groupweaver.core.errors import ApiError, ConfigError, ErrorFactory
from groupweaver.core.json_utils import (
    GroupWeaverJSONEncoder, safe_json_dumps, serialize_graph, serialize_groups
)
from groupweaver.core.models import (
    FileGroup, FileRelationship, GroupMetadata, GroupingOptions, GroupingStrategy,
    RelationshipGraph, RelationshipType
)
from groupweaver.core.relationship_detector import detect_file_relationships


class TestModels:
    """Test the core data models."""

    def test_strategy_parse(self):
        assert GroupingStrategy.parse('semantic') is GroupingStrategy.SEMANTIC
        assert GroupingStrategy.parse(GroupingStrategy.MIXED) is GroupingStrategy.MIXED

    def test_strategy_parse_rejects_unknown(self):
        with pytest.raises(ApiError) as exc_info:
            GroupingStrategy.parse('random')
        assert exc_info.value.code == 'UNKNOWN_GROUPING_STRATEGY'
        assert exc_info.value.details == {"strategy": "random"}

    def test_relationship_ends(self):
        rel = FileRelationship('a', 'b', RelationshipType.SIBLING, 0.5)

        assert rel.other_end('a') == 'b'
        assert rel.other_end('b') == 'a'
        assert rel.touches('a') and rel.touches('b')
        assert not rel.touches('c')
        assert rel.metadata == {}

    def test_file_group_defaults(self):
        group = FileGroup(id='g', name='G', strategy=GroupingStrategy.DIRECTORY,
                          file_ids=['a', 'b'], priority=2.0, project_id=3)

        assert group.size == 2
        assert group.relationships == []
        assert group.estimated_tokens is None
        assert group.metadata == GroupMetadata()
        assert isinstance(group.created_at, int) and group.created_at > 0
        assert group.updated_at == group.created_at

    def test_explicit_updated_at_is_kept(self):
        group = FileGroup(id='g', name='G', strategy=GroupingStrategy.MIXED, file_ids=['a'],
                          priority=1.0, project_id=1, created_at=1000, updated_at=2000)
        assert (group.created_at, group.updated_at) == (1000, 2000)

    def test_group_to_dict_is_camel_cased(self):
        rel = FileRelationship('a', 'b', RelationshipType.IMPORTS, 0.9, {"importPath": "./b"})
        group = FileGroup(id='g', name='G', strategy=GroupingStrategy.IMPORTS, file_ids=['a', 'b'],
                          priority=2.0, project_id=3, relationships=[rel],
                          metadata=GroupMetadata(primary_file='a'))
        data = group.to_dict()

        assert data["fileIds"] == ['a', 'b']
        assert data["projectId"] == 3
        assert data["strategy"] == 'imports'
        assert data["estimatedTokens"] is None
        assert data["metadata"] == {"primaryFile": "a"}
        assert data["relationships"] == [{
            "sourceFileId": "a", "targetFileId": "b", "type": "imports",
            "strength": 0.9, "metadata": {"importPath": "./b"}
        }]

    def test_metadata_omits_unset_fields(self):
        assert GroupMetadata().to_dict() == {}
        assert GroupMetadata(directory='', semantic_category='test').to_dict() == {
            "directory": "", "semanticCategory": "test"
        }

    def test_grouping_options_defaults(self):
        opts = GroupingOptions()
        assert (opts.max_group_size, opts.min_relationship_strength, opts.priority_threshold) == (10, 0.3, 3)


class TestErrors:

    def test_api_error_rendering(self):
        error = ErrorFactory.invalid_param('token_limit', 'integer >= 1', 0)

        assert error.status == 400
        assert error.code == 'INVALID_PARAMETER'
        assert str(error) == "[400 INVALID_PARAMETER] Invalid parameter 'token_limit': expected integer >= 1, got 0"
        assert error.to_dict()["details"] == {"param": "token_limit", "expected": "integer >= 1", "received": 0}

    def test_config_error_is_api_error(self):
        error = ConfigError("bad file")
        assert isinstance(error, ApiError)
        assert (error.status, error.code) == (500, 'INVALID_CONFIGURATION')
        assert error.details == {}


class TestJsonUtils:
    """Test JSON serialization of engine results."""

    def test_encoder_handles_models_and_builtins(self):
        group = FileGroup(id='g', name='G', strategy=GroupingStrategy.MIXED,
                          file_ids=['a'], priority=1.0, project_id=1)
        payload = {
            "group": group,
            "strategy": GroupingStrategy.SEMANTIC,
            "path": Path("src/a.py"),
            "when": datetime.datetime(2024, 1, 2, 3, 4, 5),
            "tags": {"b", "a"},
            "options": GroupingOptions(max_group_size=4),
        }

        data = json.loads(json.dumps(payload, cls=GroupWeaverJSONEncoder))

        assert data["group"]["id"] == 'g'
        assert data["strategy"] == 'semantic'
        assert data["path"] == str(Path("src/a.py"))
        assert data["when"] == '2024-01-02T03:04:05'
        assert data["tags"] == ['a', 'b']
        assert data["options"]["max_group_size"] == 4

    def test_unknown_objects_still_fail(self):
        with pytest.raises(TypeError):
            safe_json_dumps({"x": object()})

    def test_serialize_groups(self):
        groups = [FileGroup(id='g', name='G', strategy=GroupingStrategy.DIRECTORY,
                            file_ids=['a'], priority=1.0, project_id=1)]
        assert serialize_groups(groups)[0]["name"] == 'G'

    def test_serialize_graph_leaves_out_file_bodies(self, sample_files):
        graph = detect_file_relationships(sample_files)
        data = json.loads(safe_json_dumps(serialize_graph(graph)))

        assert data["nodes"] == [f.id for f in sample_files]
        assert len(data["edges"]) == len(graph.edges)
        assert set(data) == {"nodes", "edges"}

    def test_empty_graph(self):
        assert serialize_graph(RelationshipGraph(nodes={}, edges=[])) == {"nodes": [], "edges": []}
