"""
Regenerate catalog files for a manifests root.

Writes `<project>/index.json` for every project directory and a top-level
`projects.json`. Version files are the `<sha>.json` documents in each
project directory; metadata is read best effort.
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from logicmap.catalog import ProjectOption

logger = logging.getLogger(__name__)

SHA_LIKE_RE = re.compile(r"^[0-9a-f]{7,40}$", re.IGNORECASE)


def write_json_atomic(path: Path, data: Any) -> None:
    """Write JSON through a temporary file so readers never see half a file."""
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    os.replace(tmp, path)


def _read_mapping(path: Path) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("could not read %s: %s", path, e)
        return None
    return data if isinstance(data, dict) else None


def _generated_at(doc: Optional[Dict[str, Any]]) -> Optional[str]:
    if not doc:
        return None
    project = doc.get("project")
    updated_at = project.get("updated_at") if isinstance(project, dict) else None
    return doc.get("generated_at") or updated_at


def collect_versions(project_dir: Path) -> List[Dict[str, str]]:
    """
    List the sha-named version documents of one project, newest first.

    Ordered by `generated_at` descending, then by commit descending.
    """
    entries: List[Dict[str, str]] = []
    for path in sorted(project_dir.glob("*.json")):
        commit = path.stem
        if commit in ("latest", "index") or not SHA_LIKE_RE.match(commit):
            continue
        generated_at = _generated_at(_read_mapping(path))
        entry = {"commit": commit}
        if generated_at:
            entry["generated_at"] = str(generated_at)
        entries.append(entry)

    entries.sort(key=lambda e: e["commit"], reverse=True)
    entries.sort(key=lambda e: e.get("generated_at", ""), reverse=True)
    return entries


def build_index(root: Path | str) -> List[ProjectOption]:
    """
    Write index.json per project and projects.json for the whole root.

    Args:
        root: Manifests root directory (created if missing)

    Returns:
        The projects written to projects.json
    """
    root = Path(root)
    root.mkdir(parents=True, exist_ok=True)

    projects: List[ProjectOption] = []
    for project_dir in sorted(p for p in root.iterdir() if p.is_dir()):
        project_id = project_dir.name

        name = None
        latest_path = project_dir / "latest.json"
        if latest_path.exists():
            latest = _read_mapping(latest_path)
            project = latest.get("project") if latest else None
            if isinstance(project, dict) and project.get("name"):
                name = str(project["name"])
        projects.append(ProjectOption(id=project_id, name=name))

        versions = collect_versions(project_dir)
        write_json_atomic(
            project_dir / "index.json",
            {"project_id": project_id, "versions": versions},
        )
        logger.debug("indexed %s: %d version(s)", project_id, len(versions))

    write_json_atomic(
        root / "projects.json",
        [{"id": p.id, "name": p.name} if p.name else {"id": p.id} for p in projects],
    )
    logger.info("indexed projects: %d", len(projects))
    return projects
