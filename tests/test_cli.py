"""
Tests for the command-line interface.
"""

import json

import pytest
from logicmap.cli import DiagramKind, main, render_diagram
from logicmap.examples import build_example_manifest
from logicmap.serialization import manifest_to_dict


@pytest.fixture
def manifest_file(tmp_path):
    path = tmp_path / "manifest.json"
    path.write_text(json.dumps(manifest_to_dict(build_example_manifest()), ensure_ascii=False), encoding="utf-8")
    return path


class TestRenderDiagram:
    """Test fragment selection."""

    def test_defaults_to_first_module_and_flow(self):
        out = render_diagram(build_example_manifest(), DiagramKind.FLOWCHART)
        assert '  T["下单"]' in out

    def test_selects_by_id(self):
        out = render_diagram(build_example_manifest(), DiagramKind.FLOWCHART, module_id="payment", flow_id="f_refund")
        assert '  T["退款"]' in out

    def test_unknown_flow_exits(self, capsys):
        with pytest.raises(SystemExit) as exc:
            render_diagram(build_example_manifest(), DiagramKind.FLOWCHART, flow_id="nope")
        assert exc.value.code == 2
        assert "nope" in capsys.readouterr().err

    def test_module_without_state_machines_exits(self):
        with pytest.raises(SystemExit):
            render_diagram(build_example_manifest(), DiagramKind.STATE, module_id="payment")


class TestRenderCommand:
    def test_flowchart_to_stdout(self, manifest_file, capsys):
        main(["render", "flowchart", "--manifest", str(manifest_file)])
        out = capsys.readouterr().out

        assert out.startswith("flowchart TD\n")
        assert '  S1["1. create<br/>写入订单<br/>规则：库存校验"]' in out

    def test_state_to_file(self, manifest_file, tmp_path):
        target = tmp_path / "out" / "state.mmd"
        main(["render", "state", "--manifest", str(manifest_file), "--out", str(target)])

        text = target.read_text(encoding="utf-8")
        assert text.startswith("stateDiagram-v2\n")
        assert text.endswith("\n")

    def test_markdown_wrapper(self, manifest_file, capsys):
        main(["render", "dependencies", "--manifest", str(manifest_file), "--markdown"])
        out = capsys.readouterr().out

        assert out.startswith("# Example Shop dependencies\n\n```mermaid\nflowchart LR\n")
        assert out.endswith("```\n")

    def test_outline_not_wrapped(self, manifest_file, capsys):
        main(["render", "outline", "--manifest", str(manifest_file), "--markdown"])
        assert capsys.readouterr().out.startswith("# 项目：Example Shop（shop）")

    def test_project_from_root(self, tmp_path, capsys):
        project_dir = tmp_path / "shop"
        project_dir.mkdir()
        (project_dir / "latest.json").write_text(
            json.dumps(manifest_to_dict(build_example_manifest())), encoding="utf-8"
        )

        main(["render", "mindmap", "--project", "shop", "--root", str(tmp_path)])
        assert capsys.readouterr().out.startswith("mindmap\n")

    def test_missing_manifest_exits(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["render", "dependencies", "--project", "shop", "--root", str(tmp_path)])
        assert exc.value.code == 2
        assert "error:" in capsys.readouterr().err

    def test_malformed_json_exits(self, tmp_path, capsys):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(SystemExit) as exc:
            main(["render", "outline", "--manifest", str(path)])
        assert exc.value.code == 2
        assert "error: cannot load manifest" in capsys.readouterr().err

    def test_malformed_yaml_exits(self, tmp_path, capsys):
        path = tmp_path / "broken.yaml"
        path.write_text("project: [unclosed\n", encoding="utf-8")

        with pytest.raises(SystemExit) as exc:
            main(["render", "outline", "--manifest", str(path)])
        assert exc.value.code == 2
        assert "error:" in capsys.readouterr().err

    def test_manifest_path_is_directory(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["analyze", "--manifest", str(tmp_path)])
        assert exc.value.code == 2

    def test_source_required(self):
        with pytest.raises(SystemExit):
            main(["render", "dependencies"])


class TestAnalyzeCommand:
    def test_summary_and_warnings(self, manifest_file, capsys):
        main(["analyze", "--manifest", str(manifest_file)])
        captured = capsys.readouterr()

        assert captured.out.startswith("shop: 2 module(s), 2 flow(s), 2 rule(s)")
        assert "warning: Dependencies on undeclared modules: risk" in captured.err

    def test_strict_fails_on_warnings(self, manifest_file):
        with pytest.raises(SystemExit) as exc:
            main(["analyze", "--manifest", str(manifest_file), "--strict"])
        assert exc.value.code == 2


def test_index_command(tmp_path, capsys):
    (tmp_path / "shop").mkdir()
    (tmp_path / "shop" / "latest.json").write_text(
        json.dumps({"project": {"id": "shop", "name": "Example Shop"}}), encoding="utf-8"
    )
    (tmp_path / "crm").mkdir()
    main(["index", str(tmp_path)])

    assert capsys.readouterr().out.splitlines() == [
        "indexed projects: 2",
        "  crm: crm",
        "  shop: Example Shop",
    ]
    assert (tmp_path / "projects.json").exists()
