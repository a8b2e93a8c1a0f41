from __future__ import annotations

import argparse
import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence

import yaml

from logicmap.analyzer import analyze_manifest
from logicmap.backends import (
    generate_dependency_graph,
    generate_flowchart,
    generate_outline,
    generate_project_mindmap,
    generate_state_diagram,
)
from logicmap.constants import LATEST_REF, default_manifests_root
from logicmap.indexer import build_index
from logicmap.model import Flow, Manifest, Module, StateMachine
from logicmap.serialization import ManifestDecodeError
from logicmap.store import ManifestStore, load_manifest_file
from logicmap.writer import mermaid_block, write_text

logger = logging.getLogger("logicmap")


class DiagramKind(Enum):
    """Diagrams the CLI can render."""
    DEPENDENCIES = "dependencies"  # module dependency graph
    FLOWCHART = "flowchart"        # one flow
    STATE = "state"                # one state machine
    MINDMAP = "mindmap"            # Mermaid mindmap of the project
    OUTLINE = "outline"            # Markmap Markdown of the project


def _fail(message: str) -> None:
    print(f"error: {message}", file=sys.stderr)
    raise SystemExit(2)


def _pick(items: list, wanted: Optional[str], what: str):
    """Select by id, or deterministically fall back to the first item."""
    if wanted:
        for item in items:
            if item.id == wanted:
                return item
        _fail(f"{what} not found: {wanted!r}")
    if not items:
        _fail(f"manifest has no {what}")
    return items[0]


def select_module(manifest: Manifest, module_id: Optional[str]) -> Module:
    return _pick(manifest.modules, module_id, "module")


def select_flow(module: Module, flow_id: Optional[str]) -> Flow:
    return _pick(module.flows, flow_id, f"flow in module {module.id!r}")


def select_state_machine(module: Module, sm_id: Optional[str]) -> StateMachine:
    return _pick(module.state_machines, sm_id, f"state machine in module {module.id!r}")


def render_diagram(manifest: Manifest, kind: DiagramKind, *, module_id: Optional[str] = None,
                   flow_id: Optional[str] = None, state_machine_id: Optional[str] = None) -> str:
    """Select the manifest fragment a diagram needs and render it."""
    if kind is DiagramKind.DEPENDENCIES:
        return generate_dependency_graph(manifest)
    if kind is DiagramKind.MINDMAP:
        return generate_project_mindmap(manifest)
    if kind is DiagramKind.OUTLINE:
        return generate_outline(manifest)

    module = select_module(manifest, module_id)
    if kind is DiagramKind.FLOWCHART:
        return generate_flowchart(select_flow(module, flow_id), module.rules)
    return generate_state_diagram(select_state_machine(module, state_machine_id))


def _load(args: argparse.Namespace) -> Manifest:
    try:
        if args.manifest is not None:
            return load_manifest_file(args.manifest)
        return ManifestStore(args.root).load(args.project, args.ref)
    except (OSError, ManifestDecodeError, ValueError, yaml.YAMLError) as e:
        _fail(f"cannot load manifest: {e}")


def _add_source_args(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--manifest", type=Path, help="Manifest document (JSON or YAML)")
    source.add_argument("--project", type=str, help="Project id under --root")
    parser.add_argument(
        "--root",
        type=Path,
        default=Path(default_manifests_root()),
        help="Manifests root directory (default: $LOGICMAP_MANIFESTS_ROOT or ./manifests)",
    )
    parser.add_argument("--ref", type=str, default=LATEST_REF, help="Version ref (default: latest)")


def _cmd_render(args: argparse.Namespace) -> None:
    manifest = _load(args)
    kind = DiagramKind(args.diagram)
    code = render_diagram(
        manifest,
        kind,
        module_id=args.module,
        flow_id=args.flow,
        state_machine_id=args.state_machine,
    )

    if args.markdown and kind is not DiagramKind.OUTLINE:
        code = f"# {manifest.project.name} {kind.value}\n\n{mermaid_block(code)}"

    if args.out is None:
        sys.stdout.write(code if code.endswith("\n") else code + "\n")
        return
    write_text(args.out, code)
    logger.info("wrote %s diagram to %s", kind.value, args.out)


def _cmd_analyze(args: argparse.Namespace) -> None:
    report = analyze_manifest(_load(args))
    print(
        f"{report.project_id}: {report.total_modules} module(s), {report.total_flows} flow(s), "
        f"{report.total_rules} rule(s), {report.total_state_machines} state machine(s), "
        f"{report.total_pseudocodes} pseudocode(s)"
    )
    for warning in report.warnings:
        print(f"warning: {warning}", file=sys.stderr)
    if args.strict and report.warnings:
        raise SystemExit(2)


def _cmd_index(args: argparse.Namespace) -> None:
    projects = build_index(args.root)
    print(f"indexed projects: {len(projects)}")
    for project in projects:
        print(f"  {project.id}: {project.label}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logicmap",
        description="Render business-logic manifests as Mermaid diagrams and Markmap outlines.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render one diagram")
    render.add_argument("diagram", choices=[k.value for k in DiagramKind])
    _add_source_args(render)
    render.add_argument("--module", type=str, default=None, help="Module id (default: first module)")
    render.add_argument("--flow", type=str, default=None, help="Flow id (default: first flow)")
    render.add_argument(
        "--state-machine",
        type=str,
        default=None,
        help="State machine id (default: first state machine)",
    )
    render.add_argument("--out", type=Path, default=None, help="Output file (default: stdout)")
    render.add_argument(
        "--markdown",
        action="store_true",
        help="Wrap Mermaid output in a titled Markdown document",
    )
    render.set_defaults(func=_cmd_render)

    analyze = sub.add_parser("analyze", help="Report dangling references and id collisions")
    _add_source_args(analyze)
    analyze.add_argument("--strict", action="store_true", help="Exit with status 2 on warnings")
    analyze.set_defaults(func=_cmd_analyze)

    index = sub.add_parser("index", help="Regenerate projects.json and index.json files")
    index.add_argument(
        "root",
        type=Path,
        nargs="?",
        default=Path(default_manifests_root()),
        help="Manifests root directory",
    )
    index.set_defaults(func=_cmd_index)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """CLI entrypoint."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    args.func(args)


if __name__ == "__main__":
    main()
