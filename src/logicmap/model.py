"""
Core Manifest Model Objects

Defines the data structures of a business-logic manifest.

These are pure data classes representing:
    - Modules (business areas)
    - Flows (ordered business steps)
    - Rules (constraints and effects)
    - State machines (entity status lifecycles)
    - Pseudocode (operation outlines)
    - Entities and data models (storage view)
    - Manifest (root container)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about Mermaid/Markdown/target dialects
        - Are read-only for every backend
        - Are fully serializable
        - Represent structure, not behavior
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict


@dataclass
class CodeRef:
    """
    Locates a manifest entry in the source tree.

    Purely informational. Backends only ever format it as text.

    Properties:
        file: Path of the source file
        function: Function or method name (optional)
        line: Line number (optional)
    """

    file: str
    function: Optional[str] = None
    line: Optional[int] = None


@dataclass
class ProjectInfo:
    """Project metadata shown at the top of every outline."""

    id: str
    name: str
    description: str = ""
    version: str = ""
    updated_at: str = ""


# =============================================================================
# FLOWS
# =============================================================================


@dataclass
class FlowStep:
    """
    One step of a business flow.

    Properties:
        id: Step identifier
        order:
            Position of the step in the flow.
            Not necessarily contiguous and not necessarily pre-sorted;
            backends sort by it.
        name: Short step name
        description: Longer explanation (optional)
        rules: IDs of rules applied in this step (may reference unknown rules)
    """

    id: str
    order: int
    name: str
    description: Optional[str] = None
    rules: List[str] = field(default_factory=list)


@dataclass
class Flow:
    """
    A business flow: a trigger followed by ordered steps.

    Properties:
        id: Flow identifier
        name: Display name
        description: Optional explanation
        trigger: How the flow starts (optional, e.g. "user submits order")
        steps: Steps in arbitrary array order
        code_ref: Where the flow is implemented (optional)
    """

    id: str
    name: str
    description: Optional[str] = None
    trigger: Optional[str] = None
    steps: List[FlowStep] = field(default_factory=list)
    code_ref: Optional[CodeRef] = None


# =============================================================================
# RULES
# =============================================================================


@dataclass
class RuleAffects:
    """Which entities, fields and CRUD operations a rule touches."""

    entities: List[str] = field(default_factory=list)
    fields: List[str] = field(default_factory=list)
    operations: List[str] = field(default_factory=list)


@dataclass
class Rule:
    """
    A business rule.

    Properties:
        id: Rule identifier (referenced from flow steps and transitions)
        name: Display name
        description: What the rule enforces
        priority: "high", "medium" or "low"
        category: Free-form grouping, e.g. validation / calculation / permission
        constraints: Preconditions
        effects: Consequences once the rule applies
        affects: Field-level impact (optional)
        code_ref: Where the rule is implemented (optional)
    """

    id: str
    name: str
    description: str = ""
    priority: str = "medium"
    category: Optional[str] = None
    constraints: List[str] = field(default_factory=list)
    effects: List[str] = field(default_factory=list)
    affects: Optional[RuleAffects] = None
    code_ref: Optional[CodeRef] = None


# =============================================================================
# STATE MACHINES
# =============================================================================


@dataclass
class StateDefinition:
    """A single state of a state machine."""

    id: str
    name: str
    description: Optional[str] = None
    is_initial: bool = False
    is_final: bool = False


@dataclass
class StateTransition:
    """
    A directed transition between two states.

    `from_state` and `to_state` should name states of the same machine,
    but nothing enforces it. Backends must tolerate dangling ids.
    """

    from_state: str
    to_state: str
    trigger: str = ""
    description: Optional[str] = None
    rules: List[str] = field(default_factory=list)


@dataclass
class StateMachine:
    """
    Lifecycle of one status field of one entity.

    Properties:
        id: Machine identifier
        name: Display name
        description: Optional explanation
        entity: Entity the machine applies to
        status_field: Status field on that entity (`field` in documents)
        states: Declared states, in display order
        transitions: Declared transitions
    """

    id: str
    name: str
    description: Optional[str] = None
    entity: str = ""
    status_field: str = ""
    states: List[StateDefinition] = field(default_factory=list)
    transitions: List[StateTransition] = field(default_factory=list)

    def get_state(self, state_id: str) -> Optional[StateDefinition]:
        for state in self.states:
            if state.id == state_id:
                return state
        return None


# =============================================================================
# PSEUDOCODE
# =============================================================================


@dataclass
class PseudocodeStep:
    """
    One line of pseudocode.

    Properties:
        indent: Nesting level (0, 1, 2, ...)
        text: Step text
        type: comment / action / condition / loop / call / return / error
    """

    indent: int
    text: str
    type: str = "action"


@dataclass
class ApiCall:
    """An external call made by a pseudocode operation (api/db/internal/schedule)."""

    name: str
    type: str = "internal"
    method: Optional[str] = None
    endpoint: Optional[str] = None
    table: Optional[str] = None
    description: Optional[str] = None


@dataclass
class Pseudocode:
    id: str
    name: str
    description: Optional[str] = None
    params: List[str] = field(default_factory=list)
    returns: Optional[str] = None
    steps: List[PseudocodeStep] = field(default_factory=list)
    calls: List[ApiCall] = field(default_factory=list)
    code_ref: Optional[CodeRef] = None


# =============================================================================
# MODULES
# =============================================================================


@dataclass
class Module:
    """
    A business module: the unit the viewer navigates by.

    Properties:
        id: Module identifier
        name: Display name
        description: What the module covers
        tags: Free-form labels
        dependencies:
            IDs of other modules this one depends on.
            May name modules that are not part of the manifest
            (external or unknown modules).
        code_refs: Entry points in the source tree
        flows / rules / state_machines / pseudocodes:
            The four logic collections, kept separate for display.
    """

    id: str
    name: str
    description: str = ""
    tags: List[str] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    code_refs: List[CodeRef] = field(default_factory=list)
    flows: List[Flow] = field(default_factory=list)
    rules: List[Rule] = field(default_factory=list)
    state_machines: List[StateMachine] = field(default_factory=list)
    pseudocodes: List[Pseudocode] = field(default_factory=list)

    def get_rule(self, rule_id: str) -> Optional[Rule]:
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        return None

    def get_flow(self, flow_id: str) -> Optional[Flow]:
        for flow in self.flows:
            if flow.id == flow_id:
                return flow
        return None

    def get_state_machine(self, sm_id: str) -> Optional[StateMachine]:
        for sm in self.state_machines:
            if sm.id == sm_id:
                return sm
        return None


# =============================================================================
# ENTITIES AND DATA MODELS
# =============================================================================


@dataclass
class EntityKeyField:
    name: str
    label: str
    description: str = ""
    source: Optional[str] = None


@dataclass
class EntityStatus:
    value: str
    label: str
    description: Optional[str] = None


@dataclass
class Entity:
    """A business entity with its key fields and status enumeration."""

    id: str
    name: str
    description: Optional[str] = None
    models: List[str] = field(default_factory=list)
    key_fields: List[EntityKeyField] = field(default_factory=list)
    statuses: List[EntityStatus] = field(default_factory=list)


@dataclass
class EnumOption:
    value: str
    label: str


@dataclass
class FieldReference:
    model: str
    field: str


@dataclass
class ModelField:
    name: str
    type: str
    label: str = ""
    description: Optional[str] = None
    required: bool = False
    unique: bool = False
    enum_options: List[EnumOption] = field(default_factory=list)
    references: Optional[FieldReference] = None


@dataclass
class DataModelSource:
    """Schema file a data model was extracted from (yao/prisma/typeorm/sql/other)."""

    file: str
    type: str = "other"


@dataclass
class DataModel:
    id: str
    name: str
    table: str = ""
    description: str = ""
    entity: Optional[str] = None
    fields: List[ModelField] = field(default_factory=list)
    source: Optional[DataModelSource] = None


# =============================================================================
# GLOSSARY / CHANGELOG
# =============================================================================


@dataclass
class GlossaryEntry:
    term: str
    description: str = ""


@dataclass
class ChangelogEntry:
    date: str
    type: str
    summary: str
    details: Optional[str] = None


@dataclass
class Manifest:
    """
    Root container for one project's business-logic manifest.

    Every diagram is derived from this object alone.

    ARCHITECTURAL PRINCIPLE:
        Manifest is a snapshot.
        Backends read it and never mutate it.
        Each backend call produces a fresh string.

    Properties:
        project: Project metadata
        modules: Business modules, in display order
        data_models: Storage-level models
        entities: Business entities (older manifests may omit them)
        glossary: Term key -> GlossaryEntry
        changelog: Manifest history entries
        schema: The `$schema` marker of the source document

    INVARIANTS (expected, NOT enforced):
        - Module/flow/rule/state IDs are unique within their collection
        - Dependencies and rule references point at declared IDs
        Backends must tolerate both being violated.
    """

    project: ProjectInfo
    modules: List[Module] = field(default_factory=list)
    data_models: List[DataModel] = field(default_factory=list)
    entities: List[Entity] = field(default_factory=list)
    glossary: Dict[str, GlossaryEntry] = field(default_factory=dict)
    changelog: List[ChangelogEntry] = field(default_factory=list)
    schema: str = ""

    def get_module(self, module_id: str) -> Optional[Module]:
        """
        Retrieve a module by ID.

        Args:
            module_id: Module identifier

        Returns:
            The first module with that ID, or None if not found
        """
        for module in self.modules:
            if module.id == module_id:
                return module
        return None
