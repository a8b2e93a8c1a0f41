"""
Demo: Run the analyzer on the example manifest and print the report.
"""

from logicmap.analyzer import analyze_manifest
from logicmap.examples import build_example_manifest
from logicmap.serialization import manifest_to_yaml


def print_report(report):
    """Pretty-print a ManifestReport."""
    print()
    print("=" * 70)
    print(f"MANIFEST ANALYSIS REPORT: {report.project_id}")
    print("=" * 70)
    print()

    print("📊 LOGIC INVENTORY")
    print(f"  Modules:               {report.total_modules}")
    print(f"  Flows:                 {report.total_flows}")
    print(f"  Flow Steps:            {report.total_steps}")
    print(f"  Rules:                 {report.total_rules}")
    print(f"  State Machines:        {report.total_state_machines}")
    print(f"  Pseudocode:            {report.total_pseudocodes}")
    print(f"  Data Models:           {report.total_data_models}")
    print()

    print("🔗 DEPENDENCIES")
    external = sorted(report.external_dependencies)
    print(f"  External Modules:      {external if external else 'None'}")
    print(f"  Has Cycles:            {'YES' if report.has_dependency_cycle else 'NO'}")
    if report.has_dependency_cycle and report.cycle_example:
        print(f"    Example: {' -> '.join(report.cycle_example)}")
    print()

    print("🧩 REFERENCES")
    print(f"  Dangling Rule Refs:    {len(report.dangling_rule_refs)}")
    for key, missing in sorted(report.dangling_rule_refs.items()):
        print(f"    {key}: {sorted(missing)}")
    print(f"  Dangling State Refs:   {len(report.dangling_state_refs)}")
    for key, missing in sorted(report.dangling_state_refs.items()):
        print(f"    {key}: {sorted(missing)}")
    print(f"  Node Id Collisions:    {len(report.node_id_collisions)}")
    print()

    if report.warnings:
        print("⚠️  WARNINGS")
        for i, warning in enumerate(report.warnings, 1):
            print(f"  {i}. {warning}")
    else:
        print("✨ NO WARNINGS - Manifest looks clean!")
    print()


if __name__ == "__main__":
    manifest = build_example_manifest()

    report = analyze_manifest(manifest)
    print_report(report)

    # Also save to YAML for inspection
    with open("example_manifest_output.yaml", "w", encoding="utf-8") as f:
        f.write(manifest_to_yaml(manifest))
    print("✅ Manifest exported to example_manifest_output.yaml")
