"""
Markdown outline generator (Markmap mind map).

Walks the whole manifest in a fixed order and emits headings for the
big sections and nested bullets for everything below them:

    Project -> Modules -> Entities -> Data models -> Glossary -> Changelog

Every top-level section and every logic collection of a module is
announced with its count, even when empty, so two manifests always produce
outlines of the same shape. Optional attributes are simply left out.
"""

import html
from typing import Dict, List

from logicmap.backends.lines import LineBuilder
from logicmap.backends.sanitize import (
    dedupe,
    escape_outline_text,
    format_code_ref,
    inline_code,
)
from logicmap.constants import LABEL_LIST_SEPARATOR, MAX_PSEUDOCODE_INDENT, PRIORITY_LABELS
from logicmap.model import (
    ApiCall,
    DataModel,
    Entity,
    Flow,
    Manifest,
    Module,
    Pseudocode,
    Rule,
    StateMachine,
)


def _text(value) -> str:
    # Markmap renders node content as HTML; the <br/> token added by the
    # label escaper must survive, so HTML escaping happens first.
    return escape_outline_text(html.escape(str(value), quote=False))


def _joined(values: List[str]) -> str:
    return _text(LABEL_LIST_SEPARATOR.join(values))


def _count(title: str, items) -> str:
    return f"{title}（{len(items)}）"


def _flow(out: LineBuilder, flow: Flow, rules_by_id: Dict[str, Rule]) -> None:
    out.bullet(_text(flow.name), 1)
    if flow.trigger:
        out.bullet(f"触发：{_text(flow.trigger)}", 2)
    if flow.description:
        out.bullet(f"说明：{_text(flow.description)}", 2)
    code = format_code_ref(flow.code_ref)
    if code:
        out.bullet(f"代码定位：{inline_code(code)}", 2)

    out.bullet(_count("步骤", flow.steps), 2)
    for step in sorted(flow.steps, key=lambda s: s.order):
        parts = [f"{step.order}. {_text(step.name)}"]
        if step.description:
            parts.append(_text(step.description))
        rule_names = dedupe(
            rules_by_id[rid].name if rid in rules_by_id else rid for rid in step.rules
        )
        if rule_names:
            parts.append(f"规则：{_joined(rule_names)}")
        out.bullet(" / ".join(parts), 3)


def _rule(out: LineBuilder, rule: Rule) -> None:
    out.bullet(_text(rule.name), 1)
    priority = PRIORITY_LABELS.get(rule.priority, rule.priority)
    out.bullet(f"优先级：{_text(priority)}", 2)
    if rule.category:
        out.bullet(f"分类：{_text(rule.category)}", 2)
    if rule.description:
        out.bullet(f"说明：{_text(rule.description)}", 2)
    if rule.constraints:
        out.bullet(f"前置条件：{_joined(rule.constraints)}", 2)
    if rule.effects:
        out.bullet(f"执行后果：{_joined(rule.effects)}", 2)
    if rule.affects is not None and rule.affects.fields:
        out.bullet(f"影响字段：{_joined(dedupe(rule.affects.fields))}", 2)
    code = format_code_ref(rule.code_ref)
    if code:
        out.bullet(f"代码定位：{inline_code(code)}", 2)


def _state_machine(out: LineBuilder, sm: StateMachine) -> None:
    out.bullet(f"{_text(sm.name)}（{_text(sm.entity)}.{_text(sm.status_field)}）", 1)
    if sm.description:
        out.bullet(f"说明：{_text(sm.description)}", 2)

    out.bullet(_count("状态", sm.states), 2)
    for state in sm.states:
        tags = []
        if state.is_initial:
            tags.append("初始")
        if state.is_final:
            tags.append("终态")
        name = _text(state.name)
        out.bullet(f"{name}（{LABEL_LIST_SEPARATOR.join(tags)}）" if tags else name, 3)

    out.bullet(_count("转换", sm.transitions), 2)
    for trans in sm.transitions:
        label = (
            f"{_text(trans.from_state)} -> {_text(trans.to_state)}"
            f" / 触发：{_text(trans.trigger or '-')}"
        )
        if trans.description:
            label = f"{label} / {_text(trans.description)}"
        out.bullet(label, 3)


def _call(call: ApiCall) -> str:
    details = [d for d in (call.method, call.endpoint, call.table) if d]
    label = f"{_text(call.name)}（{_text(call.type)}）"
    if details:
        label = f"{label} {inline_code(' '.join(details))}"
    if call.description:
        label = f"{label}：{_text(call.description)}"
    return label


def _pseudocode(out: LineBuilder, pc: Pseudocode) -> None:
    out.bullet(inline_code(f"{pc.name}({', '.join(pc.params)})"), 1)
    if pc.description:
        out.bullet(f"说明：{_text(pc.description)}", 2)
    if pc.returns:
        out.bullet(f"返回：{_text(pc.returns)}", 2)
    code = format_code_ref(pc.code_ref)
    if code:
        out.bullet(f"代码定位：{inline_code(code)}", 2)

    out.bullet(_count("步骤", pc.steps), 2)
    for step in pc.steps:
        indent = min(MAX_PSEUDOCODE_INDENT, max(0, step.indent))
        out.bullet(_text(step.text), 3 + indent)

    if pc.calls:
        out.bullet(_count("调用", pc.calls), 2)
        for call in pc.calls:
            out.bullet(_call(call), 3)


def _module(out: LineBuilder, module: Module) -> None:
    out.heading(f"{_text(module.name)}（{_text(module.id)}）", 3)
    if module.description:
        out.bullet(f"说明：{_text(module.description)}")
    tags = dedupe(module.tags)
    if tags:
        out.bullet(f"标签：{_joined(tags)}")
    deps = dedupe(module.dependencies)
    if deps:
        out.bullet(f"依赖：{_joined(deps)}")

    code_refs = dedupe(format_code_ref(ref) for ref in module.code_refs)
    if code_refs:
        out.bullet(_count("代码入口", code_refs))
        for code in code_refs:
            out.bullet(inline_code(code), 1)

    rules_by_id: Dict[str, Rule] = {}
    for rule in module.rules:
        rules_by_id.setdefault(rule.id, rule)

    out.bullet(_count("流程", module.flows))
    for flow in module.flows:
        _flow(out, flow, rules_by_id)

    out.bullet(_count("规则", module.rules))
    for rule in module.rules:
        _rule(out, rule)

    out.bullet(_count("状态机", module.state_machines))
    for sm in module.state_machines:
        _state_machine(out, sm)

    out.bullet(_count("伪代码", module.pseudocodes))
    for pc in module.pseudocodes:
        _pseudocode(out, pc)


def _entity(out: LineBuilder, entity: Entity) -> None:
    out.heading(f"{_text(entity.name)}（{_text(entity.id)}）", 3)
    if entity.description:
        out.bullet(f"说明：{_text(entity.description)}")
    if entity.models:
        out.bullet(f"关联模型：{_joined(entity.models)}")
    if entity.key_fields:
        out.bullet(_count("核心字段", entity.key_fields))
        for kf in entity.key_fields:
            meta = f"字段名：{kf.name}"
            if kf.source:
                meta = f"{meta} / 来源：{kf.source}"
            out.bullet(f"{_text(kf.label)}：{_text(kf.description)}（{_text(meta)}）", 1)
    if entity.statuses:
        out.bullet(_count("状态", entity.statuses))
        for status in entity.statuses:
            line = f"{_text(status.label)}（{_text(status.value)}）"
            if status.description:
                line = f"{line}：{_text(status.description)}"
            out.bullet(line, 1)


def _data_model(out: LineBuilder, dm: DataModel) -> None:
    out.heading(f"{_text(dm.name)}（{_text(dm.table)}）", 3)
    if dm.description:
        out.bullet(f"说明：{_text(dm.description)}")
    if dm.entity:
        out.bullet(f"对应实体：{_text(dm.entity)}")
    if dm.source is not None and dm.source.file:
        out.bullet(f"来源：{inline_code(dm.source.file)}")
    if dm.fields:
        out.bullet(_count("字段", dm.fields))
        for f in dm.fields:
            line = inline_code(f"{f.name}: {f.type}")
            if f.label:
                line = f"{line} - {_text(f.label)}"
            out.bullet(line, 1)


def generate_outline(manifest: Manifest) -> str:
    """
    Generate Markmap Markdown for the whole manifest.

    Args:
        manifest: Manifest to walk

    Returns:
        Markdown text ending with a newline
    """
    out = LineBuilder()
    project = manifest.project

    version = f" v{_text(project.version)}" if project.version else ""
    out.heading(f"项目：{_text(project.name)}（{_text(project.id)}）{version}", 1)
    out.bullet(f"项目说明：{_text(project.description or '-')}")
    out.bullet(f"更新时间：{_text(project.updated_at or '-')}")

    out.heading(_count("模块", manifest.modules), 2)
    for module in manifest.modules:
        _module(out, module)

    out.heading(_count("实体", manifest.entities), 2)
    for entity in manifest.entities:
        _entity(out, entity)

    out.heading(_count("数据模型", manifest.data_models), 2)
    for dm in manifest.data_models:
        _data_model(out, dm)

    out.heading(_count("术语表", manifest.glossary), 2)
    for key, entry in manifest.glossary.items():
        out.bullet(f"{_text(key)}（{_text(entry.term)}）：{_text(entry.description)}")

    out.heading(_count("变更历史", manifest.changelog), 2)
    for change in manifest.changelog:
        out.bullet(f"{_text(change.date)} / {_text(change.type)}：{_text(change.summary)}")

    return out.render(trailing_newline=True)


__all__ = ["generate_outline"]
