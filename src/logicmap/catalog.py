"""
Project catalog documents.

`projects.json` and `<project>/index.json` have each been published in more
than one shape over time. The decoders here accept every known shape and
return typed options; anything else raises ManifestDecodeError.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

from logicmap.constants import LATEST_REF, SHORT_SHA_LENGTH
from logicmap.serialization import ManifestDecodeError


@dataclass(frozen=True)
class ProjectOption:
    id: str
    name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name or self.id


@dataclass(frozen=True)
class VersionOption:
    """A selectable manifest version: "latest" or a commit sha."""

    ref: str
    label: str
    generated_at: Optional[str] = None


def short_sha(sha: str) -> str:
    return sha[:SHORT_SHA_LENGTH]


def _all(items: List[Any], predicate) -> bool:
    return all(predicate(x) for x in items)


def parse_projects(raw: Any) -> List[ProjectOption]:
    """
    Decode `projects.json`.

    Accepted shapes:
        ["shop", "crm"]
        [{"id": "shop", "name": "Shop"}, {"id": "crm"}]
    """
    if isinstance(raw, list):
        if _all(raw, lambda x: isinstance(x, str)):
            return [ProjectOption(id=x) for x in raw]
        if _all(raw, lambda x: isinstance(x, dict) and "id" in x):
            return [ProjectOption(id=str(x["id"]), name=x.get("name")) for x in raw]
    raise ManifestDecodeError(
        "Invalid projects.json format. Expected string[] or {id,name?}[]"
    )


def _text_or_none(value: Any) -> Optional[str]:
    # Sort keys are always strings, even for numeric timestamps.
    return None if value is None or value == "" else str(value)


def _version(commit: str, generated_at: Optional[str] = None) -> VersionOption:
    label = short_sha(commit)
    if generated_at:
        label = f"{label} ({generated_at})"
    return VersionOption(ref=commit, label=label, generated_at=generated_at)


def parse_versions(raw: Any) -> List[VersionOption]:
    """
    Decode a project's `index.json` into version options.

    Accepted shapes:
        ["<sha>", ...]
        {"project_id": ..., "versions": ["<sha>", ...]}
        {"project_id": ..., "versions": [{"commit": "<sha>", "generated_at": ...}, ...]}

    Versions are ordered newest first by `generated_at` (entries without one
    keep their relative order at the end). "latest" is always the first
    option, even when the index is empty or outdated.
    """
    versions: List[VersionOption] = []

    if isinstance(raw, list) and _all(raw, lambda x: isinstance(x, str)):
        versions = [_version(c) for c in raw]
    elif isinstance(raw, dict) and "versions" in raw:
        entries = raw["versions"]
        if isinstance(entries, list) and _all(entries, lambda x: isinstance(x, str)):
            versions = [_version(c) for c in entries]
        elif isinstance(entries, list) and _all(entries, lambda x: isinstance(x, dict) and "commit" in x):
            versions = [
                _version(str(e["commit"]), _text_or_none(e.get("generated_at"))) for e in entries
            ]
        else:
            raise ManifestDecodeError("Invalid index.json versions format")
    else:
        raise ManifestDecodeError("Invalid index.json format")

    versions.sort(key=lambda v: v.generated_at or "", reverse=True)
    return [VersionOption(ref=LATEST_REF, label=LATEST_REF)] + versions
