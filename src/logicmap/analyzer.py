"""
Manifest Analyzer: early diagnostics and inventory of logic manifests.

This module provides lightweight analysis of Manifest objects:
    - Logic inventory (flows, rules, state machines, pseudocode)
    - Dangling references (rules, states, module dependencies)
    - Duplicate ids and node-id collisions after sanitization
    - Module dependency cycles

IMPORTANT: This is read-only. It does NOT modify the manifest and it does
NOT change what the diagram backends emit. Backends degrade gracefully on
everything reported here; the report is for manifest authors.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from logicmap.backends.sanitize import dedupe, make_node_id
from logicmap.constants import MODULE_NODE_PREFIX
from logicmap.model import Manifest


def _duplicates(ids: Iterable[str]) -> Set[str]:
    seen: Set[str] = set()
    dupes: Set[str] = set()
    for item in ids:
        if item in seen:
            dupes.add(item)
        seen.add(item)
    return dupes


def _find_cycle_dfs(graph: Dict[str, List[str]], start: str, visited: Set[str],
                    rec_stack: Set[str], path: List[str]) -> Optional[List[str]]:
    """DFS to find a cycle starting from a node."""
    visited.add(start)
    rec_stack.add(start)
    path.append(start)

    for neighbor in graph.get(start, []):
        if neighbor not in visited:
            cycle = _find_cycle_dfs(graph, neighbor, visited, rec_stack, path[:])
            if cycle:
                return cycle
        elif neighbor in rec_stack:
            cycle_start_idx = path.index(neighbor)
            return path[cycle_start_idx:] + [neighbor]

    rec_stack.remove(start)
    return None


@dataclass
class ManifestReport:
    """Analysis report for one manifest."""

    project_id: str
    total_modules: int = 0
    total_flows: int = 0
    total_steps: int = 0
    total_rules: int = 0
    total_state_machines: int = 0
    total_pseudocodes: int = 0
    total_data_models: int = 0

    # Dependencies
    external_dependencies: Set[str] = field(default_factory=set)
    has_dependency_cycle: bool = False
    cycle_example: Optional[List[str]] = None

    # References, keyed "module/flow" or "module/state_machine"
    dangling_rule_refs: Dict[str, Set[str]] = field(default_factory=dict)
    dangling_state_refs: Dict[str, Set[str]] = field(default_factory=dict)

    # Identity
    duplicate_module_ids: Set[str] = field(default_factory=set)
    duplicate_rule_ids: Dict[str, Set[str]] = field(default_factory=dict)
    node_id_collisions: Dict[str, List[str]] = field(default_factory=dict)

    # Empty collections
    flows_without_steps: List[str] = field(default_factory=list)
    state_machines_without_states: List[str] = field(default_factory=list)

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)


def analyze_manifest(manifest: Manifest) -> ManifestReport:
    """
    Inventory a Manifest and flag anything diagrams will render degraded.

    Returns a ManifestReport with counts and warnings.
    """
    report = ManifestReport(project_id=manifest.project.id)

    report.total_modules = len(manifest.modules)
    report.total_data_models = len(manifest.data_models)
    module_ids = {m.id for m in manifest.modules}

    # =========================================================================
    # 1. INVENTORY AND REFERENCES
    # =========================================================================

    for module in manifest.modules:
        report.total_flows += len(module.flows)
        report.total_rules += len(module.rules)
        report.total_state_machines += len(module.state_machines)
        report.total_pseudocodes += len(module.pseudocodes)

        rule_ids = {r.id for r in module.rules}
        dupes = _duplicates(r.id for r in module.rules)
        if dupes:
            report.duplicate_rule_ids[module.id] = dupes

        for flow in module.flows:
            report.total_steps += len(flow.steps)
            key = f"{module.id}/{flow.id}"
            if not flow.steps:
                report.flows_without_steps.append(key)
            missing = {rid for step in flow.steps for rid in step.rules if rid not in rule_ids}
            if missing:
                report.dangling_rule_refs[key] = missing

        for sm in module.state_machines:
            key = f"{module.id}/{sm.id}"
            if not sm.states:
                report.state_machines_without_states.append(key)
            state_ids = {s.id for s in sm.states}
            missing = set()
            for trans in sm.transitions:
                missing.update(x for x in (trans.from_state, trans.to_state) if x not in state_ids)
            if missing:
                report.dangling_state_refs[key] = missing

        for dep in dedupe(module.dependencies):
            if dep not in module_ids:
                report.external_dependencies.add(dep)

    # =========================================================================
    # 2. IDENTITY
    # =========================================================================

    report.duplicate_module_ids = _duplicates(m.id for m in manifest.modules)

    raw_by_node_id: Dict[str, List[str]] = defaultdict(list)
    for module_id in dedupe(m.id for m in manifest.modules):
        raw_by_node_id[make_node_id(MODULE_NODE_PREFIX, module_id)].append(module_id)
    report.node_id_collisions = {
        node_id: raw_ids for node_id, raw_ids in raw_by_node_id.items() if len(raw_ids) > 1
    }

    # =========================================================================
    # 3. DEPENDENCY CYCLES
    # =========================================================================

    graph: Dict[str, List[str]] = defaultdict(list)
    for module in manifest.modules:
        graph[module.id].extend(d for d in dedupe(module.dependencies) if d in module_ids)

    visited: Set[str] = set()
    for module_id in list(graph.keys()):
        if module_id not in visited:
            cycle = _find_cycle_dfs(graph, module_id, visited, set(), [])
            if cycle:
                report.has_dependency_cycle = True
                report.cycle_example = cycle
                break

    # =========================================================================
    # 4. WARNING FLAGS
    # =========================================================================

    if report.duplicate_module_ids:
        report.add_warning(
            f"Duplicate module ids: {', '.join(sorted(report.duplicate_module_ids))}"
        )

    for node_id, raw_ids in sorted(report.node_id_collisions.items()):
        report.add_warning(
            f"Module ids {', '.join(raw_ids)} share diagram node id {node_id}"
        )

    if report.external_dependencies:
        report.add_warning(
            f"Dependencies on undeclared modules: {', '.join(sorted(report.external_dependencies))}"
        )

    for key, dupes in sorted(report.duplicate_rule_ids.items()):
        report.add_warning(f"Duplicate rule ids in {key}: {', '.join(sorted(dupes))}")

    for key, missing in sorted(report.dangling_rule_refs.items()):
        report.add_warning(f"Unknown rules referenced by {key}: {', '.join(sorted(missing))}")

    for key, missing in sorted(report.dangling_state_refs.items()):
        report.add_warning(f"Unknown states referenced by {key}: {', '.join(sorted(missing))}")

    for key in report.flows_without_steps:
        report.add_warning(f"Flow without steps: {key}")

    for key in report.state_machines_without_states:
        report.add_warning(f"State machine without states: {key}")

    if report.has_dependency_cycle:
        report.add_warning(
            f"Dependency cycle: {' -> '.join(report.cycle_example)}"
        )

    return report
