"""
Test metadata filter conversion
"""

import pytest
from qdrant_client.http import models

from qdrant_vectorstore.vectorstores.filters import (
    build_metadata_filter,
    to_qdrant_filter,
)


class TestBuildMetadataFilter:
    """Test dict to Qdrant filter conversion"""

    def test_single_value(self):
        result = build_metadata_filter({"source": "wiki"}, "metadata")

        assert result == models.Filter(
            must=[
                models.FieldCondition(
                    key="metadata.source", match=models.MatchValue(value="wiki")
                )
            ]
        )

    def test_list_value_matches_any(self):
        result = build_metadata_filter({"lang": ["en", "de"]}, "meta")

        condition = result.must[0]
        assert condition.key == "meta.lang"
        assert condition.match == models.MatchAny(any=["en", "de"])

    def test_multiple_keys(self):
        result = build_metadata_filter({"a": 1, "b": True}, "metadata")

        assert [c.key for c in result.must] == ["metadata.a", "metadata.b"]

    def test_empty_dict(self):
        assert build_metadata_filter({}, "metadata") is None


class TestToQdrantFilter:
    """Test filter argument normalization"""

    def test_none_passes_through(self):
        assert to_qdrant_filter(None, "metadata") is None

    def test_qdrant_filter_passes_through(self):
        qdrant_filter = models.Filter(must_not=[])

        assert to_qdrant_filter(qdrant_filter, "metadata") is qdrant_filter

    def test_dict_is_converted(self):
        result = to_qdrant_filter({"x": 1}, "metadata")

        assert isinstance(result, models.Filter)

    def test_unsupported_type(self):
        with pytest.raises(TypeError, match="Unsupported filter type"):
            to_qdrant_filter("source == wiki", "metadata")
