"""
Read manifests from a published manifests directory.

Layout (as produced by the publishing side and `logicmap.indexer`):

    <root>/projects.json
    <root>/<project>/index.json
    <root>/<project>/latest.json            monolithic manifest or modular index
    <root>/<project>/<sha>.json
    <root>/<project>/modules/<module>.json  modular, latest
    <root>/<project>/<sha>/modules/...      modular, pinned version
    <root>/<project>/data_models.json
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List

import yaml

from logicmap.catalog import ProjectOption, VersionOption, parse_projects, parse_versions
from logicmap.constants import LATEST_REF
from logicmap.model import DataModel, Manifest, Module
from logicmap.serialization import (
    ManifestDecodeError,
    ManifestIndex,
    assemble_manifest,
    data_model_from_dict,
    decode_manifest_document,
    module_from_dict,
)

logger = logging.getLogger(__name__)


def read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


class ManifestStore:
    """Synchronous reader over one manifests root directory."""

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def _project_dir(self, project_id: str) -> Path:
        return self.root / project_id

    def _document_path(self, project_id: str, ref: str) -> Path:
        name = "latest.json" if ref == LATEST_REF else f"{ref}.json"
        return self._project_dir(project_id) / name

    def projects(self) -> List[ProjectOption]:
        return parse_projects(read_json(self.root / "projects.json"))

    def versions(self, project_id: str) -> List[VersionOption]:
        path = self._project_dir(project_id) / "index.json"
        if not path.exists():
            logger.warning("no index.json for project %s; offering latest only", project_id)
            return parse_versions([])
        return parse_versions(read_json(path))

    def load(self, project_id: str, ref: str = LATEST_REF) -> Manifest:
        """
        Load one manifest version, assembling modular manifests from parts.

        Raises:
            FileNotFoundError: if the version document does not exist
            ManifestDecodeError: if it is not a manifest document
        """
        path = self._document_path(project_id, ref)
        if not path.exists():
            raise FileNotFoundError(f"Manifest not found: {path}")

        doc = decode_manifest_document(read_json(path))
        if isinstance(doc, Manifest):
            return doc

        project_dir = self._project_dir(project_id)
        modules_base = project_dir if ref == LATEST_REF else project_dir / ref
        return assemble_from_directory(doc, modules_base, project_dir)


def assemble_from_directory(index: ManifestIndex, modules_base: Path, data_base: Path) -> Manifest:
    """
    Load the parts listed by a modular index and build the full manifest.

    Unreadable module or data-model files are skipped with a warning so one
    broken part does not hide the rest of the project.
    """
    modules: List[Module] = []
    for module_id in index.modules:
        module_path = modules_base / index.modules_dir / f"{module_id}.json"
        try:
            modules.append(module_from_dict(read_json(module_path)))
        except (OSError, ValueError) as e:
            logger.warning("failed to load module %s from %s: %s", module_id, module_path, e)

    data_models: List[DataModel] = []
    if index.data_models_ref:
        dm_path = data_base / index.data_models_ref
        try:
            raw = read_json(dm_path)
            if not isinstance(raw, list):
                raise ManifestDecodeError(
                    f"Data models document must be a list, got {type(raw).__name__}"
                )
            data_models = [data_model_from_dict(d) for d in raw]
        except (OSError, ValueError) as e:
            logger.warning("failed to load data models from %s: %s", dm_path, e)

    return assemble_manifest(index, modules, data_models)


def load_manifest_file(path: Path | str) -> Manifest:
    """
    Load a single manifest document from JSON or YAML.

    A modular index is assembled relative to the file's directory.
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yaml", ".yml"):
        raw = yaml.safe_load(text)
    else:
        raw = json.loads(text)

    doc = decode_manifest_document(raw)
    if isinstance(doc, Manifest):
        return doc
    return assemble_from_directory(doc, path.parent, path.parent)
