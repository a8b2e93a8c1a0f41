#!/usr/bin/env python3
"""
Complete Pipeline Demo: Manifest → Published Root → Index → Diagrams

Shows the full workflow:
1. Publish the example manifest as latest.json plus one pinned version
2. Regenerate projects.json / index.json
3. Read the catalog back and load a version
4. Analyze the manifest
5. Write one Markdown file per diagram
"""

import tempfile
from pathlib import Path

from logicmap.analyzer import analyze_manifest
from logicmap.backends import (
    generate_dependency_graph,
    generate_flowchart,
    generate_outline,
    generate_state_diagram,
)
from logicmap.examples import build_example_manifest
from logicmap.indexer import build_index, write_json_atomic
from logicmap.serialization import manifest_to_dict
from logicmap.store import ManifestStore
from logicmap.writer import write_md, write_text


def main():
    root = Path(tempfile.mkdtemp(prefix="logicmap-"))
    out_dir = root / "_diagrams"

    print("=" * 80)
    print("COMPLETE PIPELINE DEMO: Manifest → Index → Analysis → Diagrams")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Publish
    # =========================================================================
    print(f"\n1. PUBLISHING TO {root} ...")
    doc = manifest_to_dict(build_example_manifest())
    (root / "shop").mkdir()
    write_json_atomic(root / "shop" / "latest.json", doc)
    doc["generated_at"] = "2024-05-01T12:00:00Z"
    write_json_atomic(root / "shop" / "0a1b2c3d4e5f6789.json", doc)
    print("   ✓ Wrote latest.json and one pinned version")

    # =========================================================================
    # STEP 2: Index
    # =========================================================================
    print("\n2. INDEXING...")
    projects = build_index(root)
    print(f"   ✓ Projects: {[p.label for p in projects]}")

    # =========================================================================
    # STEP 3: Load
    # =========================================================================
    print("\n3. LOADING...")
    store = ManifestStore(root)
    versions = store.versions("shop")
    for version in versions:
        print(f"   ✓ Version: {version.label}")
    manifest = store.load("shop", versions[-1].ref)
    print(f"   ✓ Loaded {manifest.project.name}: {len(manifest.modules)} module(s)")

    # =========================================================================
    # STEP 4: Analyze
    # =========================================================================
    print("\n4. ANALYZING...")
    report = analyze_manifest(manifest)
    print(f"   ✓ External dependencies: {sorted(report.external_dependencies)}")
    print(f"   ✓ Dangling rule refs: {len(report.dangling_rule_refs)}")
    if report.warnings:
        print(f"\n   Warnings ({len(report.warnings)}):")
        for warning in report.warnings[:5]:
            print(f"      - {warning}")
        if len(report.warnings) > 5:
            print(f"      ... and {len(report.warnings) - 5} more")

    # =========================================================================
    # STEP 5: Diagrams
    # =========================================================================
    print("\n5. WRITING DIAGRAMS...")
    write_md(out_dir / "dependencies.md", f"{manifest.project.name} dependencies",
             generate_dependency_graph(manifest))
    for module in manifest.modules:
        for flow in module.flows:
            write_md(out_dir / module.id / f"flow_{flow.id}.md", flow.name,
                     generate_flowchart(flow, module.rules))
        for sm in module.state_machines:
            write_md(out_dir / module.id / f"state_{sm.id}.md", sm.name, generate_state_diagram(sm))
    write_text(out_dir / "outline.md", generate_outline(manifest))

    for path in sorted(out_dir.rglob("*.md")):
        print(f"   ✓ {path.relative_to(root)}")

    print("\n" + "=" * 80)
    print("PIPELINE COMPLETE!")
    print("=" * 80)


if __name__ == "__main__":
    main()
