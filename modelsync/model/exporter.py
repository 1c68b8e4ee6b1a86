# modelsync Model Exporter
# Writes a model as one YAML file per object into the working tree

import re
from pathlib import Path
from typing import Any

import yaml

from modelsync.errors import ModelLoadError
from modelsync.model.document import YamlModelDocument
from modelsync.utils.paths import atomic_write, remove_empty_dirs

MODEL_FOLDER = "model"
METADATA_FILE = "model.yaml"

_SAFE_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


def dump_yaml(data: dict[str, Any]) -> str:
    """Deterministic YAML so unchanged objects export to identical bytes."""
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=True, allow_unicode=True)


class ModelExporter:
    """
    Export a document to ``<working tree>/model/``.

    Layout::

        model/model.yaml          id and name of the model
        model/<type>/<id>.yaml    one file per object

    Files are only rewritten when their content changes and files of
    objects no longer in the document are removed, so the export of an
    unchanged model leaves the working tree untouched.
    """

    def __init__(self, document: YamlModelDocument):
        self.document = document

    def export(self, working_tree: Path) -> list[Path]:
        """
        Export the document.

        Returns:
            Paths that were written or deleted.

        Raises:
            ModelLoadError: If an object id or type cannot be used as a file name.
        """
        folder = working_tree / MODEL_FOLDER
        expected: set[Path] = set()
        touched: list[Path] = []

        metadata = folder / METADATA_FILE
        expected.add(metadata)
        if self._write(metadata, dump_yaml({"id": self.document.model_id, "name": self.document.name})):
            touched.append(metadata)

        for obj in self.document.sorted_objects():
            for part in (obj.type, obj.id):
                if not _SAFE_NAME.match(part):
                    raise ModelLoadError(f"Cannot export object with type {obj.type!r} and id {obj.id!r}")

            path = folder / obj.type / f"{obj.id}.yaml"
            expected.add(path)
            if self._write(path, dump_yaml(obj.to_dict())):
                touched.append(path)

        if folder.is_dir():
            for stale in folder.rglob("*.yaml"):
                if stale not in expected:
                    stale.unlink()
                    touched.append(stale)
            remove_empty_dirs(folder)

        return touched

    @staticmethod
    def _write(path: Path, content: str) -> bool:
        if path.is_file() and path.read_text(encoding="utf-8") == content:
            return False
        atomic_write(path, content)
        return True
