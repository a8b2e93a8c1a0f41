#!/usr/bin/env python3
"""
Demo: Generate every diagram for the example manifest.

Prints the dependency graph, the order flowchart, the order-status state
diagram, the project mindmap and the Markmap outline.
"""

from logicmap.backends import (
    generate_dependency_graph,
    generate_flowchart,
    generate_outline,
    generate_project_mindmap,
    generate_state_diagram,
)
from logicmap.examples import build_example_manifest


def main():
    manifest = build_example_manifest()
    order = manifest.get_module("order")

    diagrams = [
        ("DEPENDENCY GRAPH", generate_dependency_graph(manifest)),
        ("FLOWCHART: order/f1", generate_flowchart(order.get_flow("f1"), order.rules)),
        ("STATE DIAGRAM: order/order_status", generate_state_diagram(order.state_machines[0])),
        ("PROJECT MINDMAP", generate_project_mindmap(manifest)),
        ("MARKMAP OUTLINE", generate_outline(manifest)),
    ]

    print("=" * 80)
    print("DIAGRAM GENERATOR DEMO")
    print("=" * 80)

    for title, text in diagrams:
        print(f"\n{title}:")
        print("-" * 80)
        print(text.rstrip("\n"))

    print("\n" + "=" * 80)
    print("Paste Mermaid output into https://mermaid.live to preview it,")
    print("and the outline into https://markmap.js.org/repl.")
    print("=" * 80)


if __name__ == "__main__":
    main()
