"""
Tests for projects.json / index.json decoding.
"""

import pytest
from logicmap.catalog import ProjectOption, VersionOption, parse_projects, parse_versions, short_sha
from logicmap.serialization import ManifestDecodeError


class TestParseProjects:
    def test_string_list(self):
        assert parse_projects(["shop", "crm"]) == [ProjectOption("shop"), ProjectOption("crm")]

    def test_object_list(self):
        projects = parse_projects([{"id": "shop", "name": "Shop"}, {"id": "crm"}])

        assert projects[0].label == "Shop"
        assert projects[1].name is None
        assert projects[1].label == "crm"

    def test_empty_list(self):
        assert parse_projects([]) == []

    @pytest.mark.parametrize("raw", [{"shop": "Shop"}, ["shop", {"id": "crm"}], [{"name": "x"}], "shop"])
    def test_unknown_shapes_rejected(self, raw):
        with pytest.raises(ManifestDecodeError, match="projects.json"):
            parse_projects(raw)


class TestParseVersions:
    def test_latest_always_first(self):
        assert parse_versions([]) == [VersionOption(ref="latest", label="latest")]
        assert parse_versions({"versions": []})[0].ref == "latest"

    def test_bare_sha_list(self):
        sha = "abcdef1234567890abcdef"
        versions = parse_versions([sha])

        assert [v.ref for v in versions] == ["latest", sha]
        assert versions[1].label == "abcdef123456"

    def test_object_versions_sorted_newest_first(self):
        versions = parse_versions({
            "project_id": "shop",
            "versions": [
                {"commit": "aaaaaaa", "generated_at": "2024-01-01T00:00:00Z"},
                {"commit": "bbbbbbb", "generated_at": "2024-03-01T00:00:00Z"},
                {"commit": "ccccccc"},
            ],
        })

        assert [v.ref for v in versions] == ["latest", "bbbbbbb", "aaaaaaa", "ccccccc"]
        assert versions[1].label == "bbbbbbb (2024-03-01T00:00:00Z)"
        assert versions[3].label == "ccccccc"

    def test_numeric_generated_at_mixed_with_strings(self):
        versions = parse_versions({
            "versions": [
                {"commit": "aaaaaaa", "generated_at": 1704067200},
                {"commit": "bbbbbbb", "generated_at": "2024-03-01"},
                {"commit": "ccccccc", "generated_at": None},
            ],
        })

        assert [v.ref for v in versions] == ["latest", "bbbbbbb", "aaaaaaa", "ccccccc"]
        assert versions[2].generated_at == "1704067200"
        assert versions[2].label == "aaaaaaa (1704067200)"
        assert versions[3].generated_at is None

    def test_invalid_versions_entry(self):
        with pytest.raises(ManifestDecodeError, match="versions format"):
            parse_versions({"versions": 5})
        with pytest.raises(ManifestDecodeError, match="versions format"):
            parse_versions({"versions": [{"sha": "abc"}]})

    @pytest.mark.parametrize("raw", [42, None, {"project_id": "shop"}, [1, 2]])
    def test_invalid_document(self, raw):
        with pytest.raises(ManifestDecodeError, match="Invalid index.json format"):
            parse_versions(raw)


def test_short_sha():
    assert short_sha("0123456789abcdef") == "0123456789ab"
    assert short_sha("abc") == "abc"
