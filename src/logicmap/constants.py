"""Shared labels, id prefixes and defaults for the diagram backends and CLI."""
from __future__ import annotations

import os

# Node id prefixes for the dependency graph. Module and external nodes live in
# separate namespaces so an unknown dependency never merges into a module node.
MODULE_NODE_PREFIX = "mod_"
EXTERNAL_NODE_PREFIX = "ext_"

# Mermaid inline line break inside quoted labels.
MERMAID_LINE_BREAK = "<br/>"

# Markdown heading depth limit.
MAX_HEADING_LEVEL = 6
MAX_PSEUDOCODE_INDENT = 6

PRIORITY_LABELS = {"high": "高", "medium": "中", "low": "低"}

LABEL_TRIGGER = "触发"
LABEL_RULES = "规则"
LABEL_CODE = "代码"
LABEL_EXTERNAL_MODULE = "外部/未知模块"
LABEL_NO_STEPS = "暂无步骤"
LABEL_NO_STATES = "暂无状态"
LABEL_LIST_SEPARATOR = "、"

LATEST_REF = "latest"
SHORT_SHA_LENGTH = 12

MANIFESTS_ROOT_ENV = "LOGICMAP_MANIFESTS_ROOT"
MANIFESTS_ROOT_DEFAULT = "manifests"


def default_manifests_root() -> str:
    """Manifests root from the environment, else a `manifests/` directory."""
    return os.environ.get(MANIFESTS_ROOT_ENV) or MANIFESTS_ROOT_DEFAULT
