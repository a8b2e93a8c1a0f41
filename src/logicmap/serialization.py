"""
Serialization helpers for manifest objects (Manifest, Module, Flow, etc.).

This is the decode boundary: JSON/YAML documents are inspected here once and
turned into `logicmap.model` objects. Backends never look at raw dicts.

Two document shapes are accepted:
    - monolithic: the whole manifest in one document
    - modular: an index listing module ids, with modules and data models
      stored in separate documents (see `ManifestIndex`)
"""
from __future__ import annotations

import json
import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import yaml

from logicmap.model import (
    ApiCall,
    ChangelogEntry,
    CodeRef,
    DataModel,
    DataModelSource,
    Entity,
    EntityKeyField,
    EntityStatus,
    EnumOption,
    FieldReference,
    Flow,
    FlowStep,
    GlossaryEntry,
    Manifest,
    ModelField,
    Module,
    ProjectInfo,
    Pseudocode,
    PseudocodeStep,
    Rule,
    RuleAffects,
    StateDefinition,
    StateMachine,
    StateTransition,
)


class ManifestDecodeError(ValueError):
    """Raised when a document matches none of the known manifest shapes."""
    pass


def _as_int(value: Any, default: Optional[int], what: str) -> Optional[int]:
    if value is None:
        return default
    if isinstance(value, bool):
        warnings.warn(f"Invalid {what}: {value!r}", UserWarning)
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        warnings.warn(f"Invalid {what}: {value!r}", UserWarning)
        return default


def _str_list(value: Any) -> List[str]:
    if not value:
        return []
    return [str(v) for v in value if v is not None]


def _prune(d: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


# =============================================================================
# CODE REFS / PROJECT
# =============================================================================


def code_ref_to_dict(ref: CodeRef | None) -> Dict[str, Any] | None:
    if ref is None:
        return None
    return _prune({"file": ref.file, "function": ref.function, "line": ref.line})


def code_ref_from_dict(d: Dict[str, Any] | None) -> CodeRef | None:
    if not d:
        return None
    return CodeRef(
        file=str(d.get("file", "")),
        function=d.get("function"),
        line=_as_int(d.get("line"), None, "code_ref line"),
    )


def project_to_dict(p: ProjectInfo) -> Dict[str, Any]:
    return {
        "id": p.id,
        "name": p.name,
        "description": p.description,
        "version": p.version,
        "updated_at": p.updated_at,
    }


def project_from_dict(d: Dict[str, Any]) -> ProjectInfo:
    return ProjectInfo(
        id=str(d.get("id", "")),
        name=str(d.get("name", "")),
        description=d.get("description") or "",
        version=str(d.get("version") or ""),
        updated_at=str(d.get("updated_at") or ""),
    )


# =============================================================================
# FLOWS
# =============================================================================


def step_to_dict(s: FlowStep) -> Dict[str, Any]:
    return _prune({
        "id": s.id,
        "order": s.order,
        "name": s.name,
        "description": s.description,
        "rules": s.rules,
    })


def step_from_dict(d: Dict[str, Any]) -> FlowStep:
    return FlowStep(
        id=str(d.get("id", "")),
        order=_as_int(d.get("order"), 0, f"order for step {d.get('id')!r}"),
        name=str(d.get("name", "")),
        description=d.get("description"),
        rules=_str_list(d.get("rules")),
    )


def flow_to_dict(f: Flow) -> Dict[str, Any]:
    return _prune({
        "id": f.id,
        "name": f.name,
        "description": f.description,
        "trigger": f.trigger,
        "steps": [step_to_dict(s) for s in f.steps],
        "code_ref": code_ref_to_dict(f.code_ref),
    })


def flow_from_dict(d: Dict[str, Any]) -> Flow:
    return Flow(
        id=str(d.get("id", "")),
        name=str(d.get("name", "")),
        description=d.get("description"),
        trigger=d.get("trigger"),
        steps=[step_from_dict(s) for s in d.get("steps") or []],
        code_ref=code_ref_from_dict(d.get("code_ref")),
    )


# =============================================================================
# RULES
# =============================================================================


def rule_to_dict(r: Rule) -> Dict[str, Any]:
    affects = None
    if r.affects is not None:
        affects = {
            "entities": r.affects.entities,
            "fields": r.affects.fields,
            "operations": r.affects.operations,
        }
    return _prune({
        "id": r.id,
        "name": r.name,
        "description": r.description,
        "priority": r.priority,
        "category": r.category,
        "constraints": r.constraints,
        "effects": r.effects,
        "affects": affects,
        "code_ref": code_ref_to_dict(r.code_ref),
    })


def rule_from_dict(d: Dict[str, Any]) -> Rule:
    affects = d.get("affects")
    return Rule(
        id=str(d.get("id", "")),
        name=str(d.get("name", "")),
        description=d.get("description") or "",
        priority=d.get("priority") or "medium",
        category=d.get("category"),
        constraints=_str_list(d.get("constraints")),
        effects=_str_list(d.get("effects")),
        affects=RuleAffects(
            entities=_str_list(affects.get("entities")),
            fields=_str_list(affects.get("fields")),
            operations=_str_list(affects.get("operations")),
        ) if affects else None,
        code_ref=code_ref_from_dict(d.get("code_ref")),
    )


# =============================================================================
# STATE MACHINES
# =============================================================================


def state_to_dict(s: StateDefinition) -> Dict[str, Any]:
    return _prune({
        "id": s.id,
        "name": s.name,
        "description": s.description,
        "is_initial": s.is_initial or None,
        "is_final": s.is_final or None,
    })


def state_from_dict(d: Dict[str, Any]) -> StateDefinition:
    return StateDefinition(
        id=str(d.get("id", "")),
        name=str(d.get("name", d.get("id", ""))),
        description=d.get("description"),
        is_initial=bool(d.get("is_initial", False)),
        is_final=bool(d.get("is_final", False)),
    )


def transition_to_dict(t: StateTransition) -> Dict[str, Any]:
    return _prune({
        "from": t.from_state,
        "to": t.to_state,
        "trigger": t.trigger,
        "description": t.description,
        "rules": t.rules or None,
    })


def transition_from_dict(d: Dict[str, Any]) -> StateTransition:
    return StateTransition(
        from_state=str(d.get("from", "")),
        to_state=str(d.get("to", "")),
        trigger=d.get("trigger") or "",
        description=d.get("description"),
        rules=_str_list(d.get("rules")),
    )


def state_machine_to_dict(sm: StateMachine) -> Dict[str, Any]:
    return _prune({
        "id": sm.id,
        "name": sm.name,
        "description": sm.description,
        "entity": sm.entity,
        "field": sm.status_field,
        "states": [state_to_dict(s) for s in sm.states],
        "transitions": [transition_to_dict(t) for t in sm.transitions],
    })


def state_machine_from_dict(d: Dict[str, Any]) -> StateMachine:
    return StateMachine(
        id=str(d.get("id", "")),
        name=str(d.get("name", "")),
        description=d.get("description"),
        entity=d.get("entity") or "",
        status_field=d.get("field") or "",
        states=[state_from_dict(s) for s in d.get("states") or []],
        transitions=[transition_from_dict(t) for t in d.get("transitions") or []],
    )


# =============================================================================
# PSEUDOCODE
# =============================================================================


def pseudocode_to_dict(pc: Pseudocode) -> Dict[str, Any]:
    return _prune({
        "id": pc.id,
        "name": pc.name,
        "description": pc.description,
        "params": pc.params,
        "returns": pc.returns,
        "steps": [{"indent": s.indent, "text": s.text, "type": s.type} for s in pc.steps],
        "calls": [
            _prune({
                "name": c.name,
                "type": c.type,
                "method": c.method,
                "endpoint": c.endpoint,
                "table": c.table,
                "description": c.description,
            })
            for c in pc.calls
        ],
        "code_ref": code_ref_to_dict(pc.code_ref),
    })


def pseudocode_from_dict(d: Dict[str, Any]) -> Pseudocode:
    return Pseudocode(
        id=str(d.get("id", "")),
        name=str(d.get("name", "")),
        description=d.get("description"),
        params=_str_list(d.get("params")),
        returns=d.get("returns"),
        steps=[
            PseudocodeStep(
                indent=_as_int(s.get("indent"), 0, "pseudocode indent"),
                text=str(s.get("text", "")),
                type=s.get("type") or "action",
            )
            for s in d.get("steps") or []
        ],
        calls=[
            ApiCall(
                name=str(c.get("name", "")),
                type=c.get("type") or "internal",
                method=c.get("method"),
                endpoint=c.get("endpoint"),
                table=c.get("table"),
                description=c.get("description"),
            )
            for c in d.get("calls") or []
        ],
        code_ref=code_ref_from_dict(d.get("code_ref")),
    )


# =============================================================================
# MODULES
# =============================================================================


def module_to_dict(m: Module) -> Dict[str, Any]:
    return {
        "id": m.id,
        "name": m.name,
        "description": m.description,
        "tags": m.tags,
        "dependencies": m.dependencies,
        "code_refs": [code_ref_to_dict(r) for r in m.code_refs],
        "flows": [flow_to_dict(f) for f in m.flows],
        "rules": [rule_to_dict(r) for r in m.rules],
        "state_machines": [state_machine_to_dict(sm) for sm in m.state_machines],
        "pseudocodes": [pseudocode_to_dict(pc) for pc in m.pseudocodes],
    }


def module_from_dict(d: Dict[str, Any]) -> Module:
    if not isinstance(d, dict):
        raise ManifestDecodeError(f"Module must be a mapping, got {type(d).__name__}")
    return Module(
        id=str(d.get("id", "")),
        name=str(d.get("name", d.get("id", ""))),
        description=d.get("description") or "",
        tags=_str_list(d.get("tags")),
        dependencies=_str_list(d.get("dependencies")),
        code_refs=[r for r in (code_ref_from_dict(x) for x in d.get("code_refs") or []) if r],
        flows=[flow_from_dict(f) for f in d.get("flows") or []],
        rules=[rule_from_dict(r) for r in d.get("rules") or []],
        state_machines=[state_machine_from_dict(sm) for sm in d.get("state_machines") or []],
        pseudocodes=[pseudocode_from_dict(pc) for pc in d.get("pseudocodes") or []],
    )


# =============================================================================
# ENTITIES / DATA MODELS
# =============================================================================


def entity_to_dict(e: Entity) -> Dict[str, Any]:
    return _prune({
        "id": e.id,
        "name": e.name,
        "description": e.description,
        "models": e.models or None,
        "key_fields": [
            _prune({"name": f.name, "label": f.label, "description": f.description, "source": f.source})
            for f in e.key_fields
        ] or None,
        "statuses": [
            _prune({"value": s.value, "label": s.label, "description": s.description})
            for s in e.statuses
        ] or None,
    })


def entity_from_dict(d: Dict[str, Any]) -> Entity:
    return Entity(
        id=str(d.get("id", "")),
        name=str(d.get("name", "")),
        description=d.get("description"),
        models=_str_list(d.get("models")),
        key_fields=[
            EntityKeyField(
                name=str(f.get("name", "")),
                label=str(f.get("label", f.get("name", ""))),
                description=f.get("description") or "",
                source=f.get("source"),
            )
            for f in d.get("key_fields") or []
        ],
        statuses=[
            EntityStatus(
                value=str(s.get("value", "")),
                label=str(s.get("label", s.get("value", ""))),
                description=s.get("description"),
            )
            for s in d.get("statuses") or []
        ],
    )


def model_field_to_dict(f: ModelField) -> Dict[str, Any]:
    return _prune({
        "name": f.name,
        "type": f.type,
        "label": f.label,
        "description": f.description,
        "required": f.required or None,
        "unique": f.unique or None,
        "enum_options": [{"value": o.value, "label": o.label} for o in f.enum_options] or None,
        "references": {"model": f.references.model, "field": f.references.field}
        if f.references else None,
    })


def model_field_from_dict(d: Dict[str, Any]) -> ModelField:
    refs = d.get("references")
    return ModelField(
        name=str(d.get("name", "")),
        type=str(d.get("type", "")),
        label=d.get("label") or "",
        description=d.get("description"),
        required=bool(d.get("required", False)),
        unique=bool(d.get("unique", False)),
        enum_options=[
            EnumOption(value=str(o.get("value", "")), label=str(o.get("label", "")))
            for o in d.get("enum_options") or []
        ],
        references=FieldReference(model=str(refs.get("model", "")), field=str(refs.get("field", "")))
        if refs else None,
    )


def data_model_to_dict(m: DataModel) -> Dict[str, Any]:
    return _prune({
        "id": m.id,
        "name": m.name,
        "table": m.table,
        "description": m.description,
        "entity": m.entity,
        "fields": [model_field_to_dict(f) for f in m.fields],
        "source": {"file": m.source.file, "type": m.source.type} if m.source else None,
    })


def data_model_from_dict(d: Dict[str, Any]) -> DataModel:
    if not isinstance(d, dict):
        raise ManifestDecodeError(f"Data model must be a mapping, got {type(d).__name__}")
    source = d.get("source")
    return DataModel(
        id=str(d.get("id", "")),
        name=str(d.get("name", "")),
        table=d.get("table") or "",
        description=d.get("description") or "",
        entity=d.get("entity"),
        fields=[model_field_from_dict(f) for f in d.get("fields") or []],
        source=DataModelSource(file=str(source.get("file", "")), type=source.get("type") or "other")
        if source else None,
    )


# =============================================================================
# GLOSSARY / CHANGELOG
# =============================================================================


def glossary_from_dict(d: Dict[str, Any] | None) -> Dict[str, GlossaryEntry]:
    out: Dict[str, GlossaryEntry] = {}
    for key, entry in (d or {}).items():
        if isinstance(entry, dict):
            out[str(key)] = GlossaryEntry(
                term=str(entry.get("term", key)),
                description=entry.get("description") or "",
            )
        else:
            out[str(key)] = GlossaryEntry(term=str(key), description=str(entry))
    return out


def changelog_from_list(items: List[Dict[str, Any]] | None) -> List[ChangelogEntry]:
    return [
        ChangelogEntry(
            date=str(c.get("date", "")),
            type=str(c.get("type", "")),
            summary=str(c.get("summary", "")),
            details=c.get("details"),
        )
        for c in items or []
    ]


def changelog_to_list(items: List[ChangelogEntry]) -> List[Dict[str, Any]]:
    return [
        _prune({"date": c.date, "type": c.type, "summary": c.summary, "details": c.details})
        for c in items
    ]


# =============================================================================
# MANIFEST
# =============================================================================


def manifest_to_dict(m: Manifest) -> Dict[str, Any]:
    return {
        "$schema": m.schema,
        "project": project_to_dict(m.project),
        "modules": [module_to_dict(x) for x in m.modules],
        "data_models": [data_model_to_dict(x) for x in m.data_models],
        "entities": [entity_to_dict(x) for x in m.entities],
        "glossary": {
            k: {"term": v.term, "description": v.description} for k, v in m.glossary.items()
        },
        "changelog": changelog_to_list(m.changelog),
    }


def _require_mapping(d: Any) -> Dict[str, Any]:
    if not isinstance(d, dict):
        raise ManifestDecodeError(
            f"Manifest document must be a mapping, got {type(d).__name__}"
        )
    if not isinstance(d.get("project"), dict):
        raise ManifestDecodeError("Manifest document has no 'project' mapping")
    return d


def manifest_from_dict(d: Dict[str, Any]) -> Manifest:
    d = _require_mapping(d)
    return Manifest(
        project=project_from_dict(d["project"]),
        modules=[module_from_dict(x) for x in d.get("modules") or []],
        data_models=[data_model_from_dict(x) for x in d.get("data_models") or []],
        entities=[entity_from_dict(x) for x in d.get("entities") or []],
        glossary=glossary_from_dict(d.get("glossary")),
        changelog=changelog_from_list(d.get("changelog")),
        schema=str(d.get("$schema") or ""),
    )


def manifest_to_json(m: Manifest) -> str:
    return json.dumps(manifest_to_dict(m), ensure_ascii=False, sort_keys=True)


def manifest_from_json(s: str) -> Manifest:
    return manifest_from_dict(json.loads(s))


def manifest_to_yaml(m: Manifest) -> str:
    return yaml.safe_dump(manifest_to_dict(m), allow_unicode=True, sort_keys=False)


def manifest_from_yaml(s: str) -> Manifest:
    return manifest_from_dict(yaml.safe_load(s))


# =============================================================================
# MODULAR MANIFESTS
# =============================================================================


@dataclass
class ManifestIndex:
    """
    Lightweight index of a modular manifest.

    Lists module ids only; each module lives in `<modules_dir>/<id>.json`
    and data models in the document named by `data_models_ref`.
    """

    project: ProjectInfo
    modules: List[str] = field(default_factory=list)
    modules_dir: str = "modules"
    data_models_ref: Optional[str] = None
    glossary: Dict[str, GlossaryEntry] = field(default_factory=dict)
    changelog: List[ChangelogEntry] = field(default_factory=list)
    schema: str = ""


def _strip_dot_slash(path: str) -> str:
    return path[2:] if path.startswith("./") else path


def manifest_index_from_dict(d: Dict[str, Any]) -> ManifestIndex:
    d = _require_mapping(d)
    ref = d.get("data_models_ref")
    return ManifestIndex(
        project=project_from_dict(d["project"]),
        modules=_str_list(d.get("modules")),
        modules_dir=_strip_dot_slash(d.get("modules_dir") or "modules") or "modules",
        data_models_ref=_strip_dot_slash(ref) if ref else None,
        glossary=glossary_from_dict(d.get("glossary")),
        changelog=changelog_from_list(d.get("changelog")),
        schema=str(d.get("$schema") or ""),
    )


def decode_manifest_document(d: Any) -> Union[Manifest, ManifestIndex]:
    """
    Decode a top-level manifest document into one of its known shapes.

    Returns:
        ManifestIndex when the document declares `structure: modular`,
        otherwise a full Manifest.

    Raises:
        ManifestDecodeError: if the document is not a manifest at all
    """
    d = _require_mapping(d)
    if d.get("structure") == "modular":
        return manifest_index_from_dict(d)
    return manifest_from_dict(d)


def assemble_manifest(
    index: ManifestIndex,
    modules: List[Module],
    data_models: List[DataModel] | None = None,
) -> Manifest:
    """Build a full Manifest from a modular index and its loaded parts."""
    return Manifest(
        project=index.project,
        modules=list(modules),
        data_models=list(data_models or []),
        glossary=dict(index.glossary),
        changelog=list(index.changelog),
        schema=index.schema,
    )
