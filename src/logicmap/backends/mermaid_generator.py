"""
Mermaid diagram generator for logic manifests.

Converts manifest fragments into Mermaid source text.

Supports four diagrams:
    - Module dependency graph (flowchart LR, whole manifest)
    - Flowchart of a single flow (flowchart TD)
    - State diagram of a single state machine (stateDiagram-v2)
    - Project overview mind map (mindmap, whole manifest)

Every generator is a pure function: it reads its input, never mutates it,
and returns a fresh string. Missing optional data degrades to an omitted
line or a placeholder node; nothing here raises on dangling references.
"""

from typing import Dict, List, Optional, Set

from logicmap.backends.lines import LineBuilder
from logicmap.backends.sanitize import (
    dedupe,
    escape_label,
    escape_outline_text,
    format_code_ref,
    make_node_id,
)
from logicmap.constants import (
    EXTERNAL_NODE_PREFIX,
    LABEL_CODE,
    LABEL_EXTERNAL_MODULE,
    LABEL_LIST_SEPARATOR,
    LABEL_NO_STATES,
    LABEL_NO_STEPS,
    LABEL_RULES,
    LABEL_TRIGGER,
    MERMAID_LINE_BREAK,
    MODULE_NODE_PREFIX,
)
from logicmap.model import Flow, FlowStep, Manifest, Module, Rule, StateMachine


def _node(node_id: str, label: str) -> str:
    return f'{node_id}["{escape_label(label)}"]'


def _two_line_label(first: str, second: str) -> str:
    return f"{escape_label(first)}{MERMAID_LINE_BREAK}({escape_label(second)})"


# =============================================================================
# MODULE DEPENDENCY GRAPH
# =============================================================================


def generate_dependency_graph(manifest: Manifest) -> str:
    """
    Generate a left-to-right graph of module dependencies.

    Edges run from the dependant module to its dependency. A dependency
    that names no module in the manifest gets its own "external/unknown"
    node, declared once however many modules point at it.

    Args:
        manifest: Manifest whose modules are drawn

    Returns:
        Mermaid flowchart source
    """
    out = LineBuilder("flowchart LR")

    module_by_id: Dict[str, Module] = {}
    for module in manifest.modules:
        module_by_id[module.id] = module

    for module in manifest.modules:
        node_id = make_node_id(MODULE_NODE_PREFIX, module.id)
        out.add(f'{node_id}["{_two_line_label(module.name, module.id)}"]', 1)

    declared_external: Set[str] = set()
    for module in manifest.modules:
        src = make_node_id(MODULE_NODE_PREFIX, module.id)
        for dep in dedupe(module.dependencies):
            target = module_by_id.get(dep)
            if target is not None:
                dst = make_node_id(MODULE_NODE_PREFIX, target.id)
            else:
                dst = make_node_id(EXTERNAL_NODE_PREFIX, dep)
                if dst not in declared_external:
                    declared_external.add(dst)
                    out.add(f'{dst}["{_two_line_label(dep, LABEL_EXTERNAL_MODULE)}"]', 1)
            out.add(f"{src} --> {dst}", 1)

    return out.render()


# =============================================================================
# FLOWCHART
# =============================================================================


def _step_label(step: FlowStep, rules_by_id: Dict[str, Rule]) -> str:
    parts = [f"{step.order}. {step.name}"]
    if step.description:
        parts.append(step.description)
    rule_names = dedupe(
        rules_by_id[rid].name if rid in rules_by_id else rid for rid in step.rules
    )
    if rule_names:
        parts.append(f"{LABEL_RULES}：{LABEL_LIST_SEPARATOR.join(rule_names)}")
    return "\n".join(parts)


def generate_flowchart(flow: Flow, rules: Optional[List[Rule]] = None) -> str:
    """
    Generate a top-down flowchart for one flow.

    Steps are chained in ascending `order` (stable for ties) whatever their
    position in `flow.steps`. Rule ids on a step are shown by rule name,
    falling back to the raw id when the owning module declares no such rule.

    Args:
        flow: Flow to draw
        rules: Rules of the module that owns the flow

    Returns:
        Mermaid flowchart source
    """
    rules_by_id: Dict[str, Rule] = {}
    for rule in rules or []:
        rules_by_id.setdefault(rule.id, rule)

    out = LineBuilder("flowchart TD")

    title_id = "T"
    trigger_id = "TR"
    out.add(_node(title_id, flow.name), 1)
    trigger_label = f"{LABEL_TRIGGER}：{flow.trigger or '-'}"
    out.add(f'{trigger_id}(["{escape_label(trigger_label)}"])', 1)
    out.add(f"{title_id} --> {trigger_id}", 1)

    ordered = sorted(flow.steps, key=lambda s: s.order)
    step_ids: List[str] = []
    for index, step in enumerate(ordered, start=1):
        step_id = f"S{index}"
        step_ids.append(step_id)
        out.add(_node(step_id, _step_label(step, rules_by_id)), 1)

    if not step_ids:
        empty_id = "EMPTY"
        out.add(_node(empty_id, LABEL_NO_STEPS), 1)
        out.add(f"{trigger_id} --> {empty_id}", 1)
    else:
        out.add(f"{trigger_id} --> {step_ids[0]}", 1)
        for src, dst in zip(step_ids, step_ids[1:]):
            out.add(f"{src} --> {dst}", 1)

    code = format_code_ref(flow.code_ref)
    if code:
        code_id = "CODE"
        out.add(_node(code_id, f"{LABEL_CODE}：{code}"), 1)
        out.add(f"{title_id} -.-> {code_id}", 1)

    return out.render()


# =============================================================================
# STATE DIAGRAM
# =============================================================================


class _StateAliases:
    """Mints S1, S2, ... per state id; unknown ids get the next alias on demand."""

    def __init__(self) -> None:
        self._by_id: Dict[str, str] = {}

    def alias(self, state_id: str) -> str:
        existing = self._by_id.get(state_id)
        if existing is None:
            existing = f"S{len(self._by_id) + 1}"
            self._by_id[state_id] = existing
        return existing


def generate_state_diagram(sm: StateMachine) -> str:
    """
    Generate a Mermaid state diagram for one state machine.

    States are referenced through short aliases instead of their ids, so
    Chinese names and punctuation never reach an identifier position.
    Transitions naming undeclared states still get an alias, which yields a
    visibly wrong but renderable diagram.
    """
    out = LineBuilder("stateDiagram-v2")
    out.add(f"%% {escape_label(f'{sm.name}（{sm.entity}.{sm.status_field}）')}", 1)

    aliases = _StateAliases()
    for state in sm.states:
        aliases.alias(state.id)

    if not sm.states:
        out.add(f'state "{LABEL_NO_STATES}" as EMPTY', 1)
        out.add("[*] --> EMPTY", 1)

    for state in sm.states:
        out.add(f'state "{escape_label(state.name)}" as {aliases.alias(state.id)}', 1)

    initial = next((s for s in sm.states if s.is_initial), None)
    if initial is None and sm.states:
        initial = sm.states[0]
    if initial is not None:
        out.add(f"[*] --> {aliases.alias(initial.id)}", 1)

    for trans in sm.transitions:
        src = aliases.alias(trans.from_state)
        dst = aliases.alias(trans.to_state)
        label = f": {escape_label(trans.trigger)}" if trans.trigger else ""
        out.add(f"{src} --> {dst}{label}", 1)

    for state in sm.states:
        if state.is_final:
            out.add(f"{aliases.alias(state.id)} --> [*]", 1)

    return out.render()


# =============================================================================
# PROJECT MIND MAP
# =============================================================================


def generate_project_mindmap(manifest: Manifest) -> str:
    """
    Generate a Mermaid mindmap overview of the whole project.

    Only non-empty groups are shown; the Markdown outline is the place
    where every collection is listed with its count.
    """
    out = LineBuilder("mindmap")
    mm = escape_outline_text

    project = manifest.project
    out.add(f"root(({mm(f'项目：{project.name}（{project.id}）')}))", 1)

    out.add("模块", 2)
    for module in manifest.modules:
        out.add(mm(f"{module.name} ({module.id})"), 3)

        deps = dedupe(module.dependencies)
        if deps:
            out.add("依赖", 4)
            for dep in deps:
                out.add(mm(dep), 5)

        code_refs = dedupe(format_code_ref(ref) for ref in module.code_refs)
        if code_refs:
            out.add("代码入口", 4)
            for code in code_refs:
                out.add(mm(code), 5)

        if module.flows:
            out.add("流程", 4)
            for flow in module.flows:
                out.add(mm(flow.name), 5)
                code = format_code_ref(flow.code_ref)
                if code:
                    out.add(f"{LABEL_CODE}：{mm(code)}", 6)

        if module.rules:
            out.add("规则", 4)
            for rule in module.rules:
                out.add(mm(rule.name), 5)
                code = format_code_ref(rule.code_ref)
                if code:
                    out.add(f"{LABEL_CODE}：{mm(code)}", 6)

        if module.state_machines:
            out.add("状态机", 4)
            for sm in module.state_machines:
                out.add(mm(f"{sm.name}（{sm.entity}.{sm.status_field}）"), 5)

        if module.pseudocodes:
            out.add("伪代码", 4)
            for pc in module.pseudocodes:
                out.add(mm(pc.name), 5)
                code = format_code_ref(pc.code_ref)
                if code:
                    out.add(f"{LABEL_CODE}：{mm(code)}", 6)

    if manifest.entities:
        out.add("实体", 2)
        for entity in manifest.entities:
            out.add(mm(f"{entity.name} ({entity.id})"), 3)

    if manifest.data_models:
        out.add("数据模型", 2)
        for dm in manifest.data_models:
            label = f"{dm.name} ({dm.table})" if dm.table else dm.name
            out.add(mm(label), 3)
            if dm.source is not None and dm.source.file:
                out.add(f"来源：{mm(dm.source.file)}", 4)

    return out.render()


__all__ = [
    "generate_dependency_graph",
    "generate_flowchart",
    "generate_state_diagram",
    "generate_project_mindmap",
]
