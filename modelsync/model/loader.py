# modelsync Model Loader
# Rebuilds a model from the working tree, restoring missing referenced objects

from pathlib import Path
from typing import Optional

import yaml

from modelsync.errors import ModelLoadError
from modelsync.model.document import ModelObject, YamlModelDocument
from modelsync.model.exporter import METADATA_FILE, MODEL_FOLDER, ModelExporter


class ModelLoader:
    """
    Load a document from its flat-file export.

    A merge can delete an object that another, still present object
    refers to. Such objects are restored from the in-memory model as it
    was before loading, written back to the working tree and reported via
    ``get_restored_objects_as_string()``.
    """

    def __init__(self, document: YamlModelDocument):
        self.document = document
        self.restored_objects: list[ModelObject] = []

    def load(self, working_tree: Path) -> YamlModelDocument:
        """
        Replace the document contents with the export below working_tree.

        Raises:
            ModelLoadError: If there is no export or a file is malformed.
        """
        folder = working_tree / MODEL_FOLDER
        metadata_file = folder / METADATA_FILE
        if not metadata_file.is_file():
            raise ModelLoadError(f"No model found in {folder}")

        metadata = self._read(metadata_file)
        objects: dict[str, ModelObject] = {}

        for path in sorted(folder.glob("*/*.yaml")):
            obj = ModelObject.from_dict(self._read(path))
            objects[obj.id] = obj

        previous = dict(self.document.objects)
        self.restored_objects = self._restore_missing(objects, previous)

        self.document.replace_contents(
            str(metadata.get("id") or self.document.model_id),
            str(metadata.get("name") or ""),
            objects,
        )

        if self.document.file is not None:
            self.document.save()

        if self.restored_objects:
            ModelExporter(self.document).export(working_tree)

        return self.document

    @staticmethod
    def _restore_missing(objects: dict[str, ModelObject], previous: dict[str, ModelObject]) -> list[ModelObject]:
        restored: list[ModelObject] = []
        pending = list(objects.values())

        while pending:
            obj = pending.pop()
            for ref in obj.refs:
                if ref in objects or ref not in previous:
                    continue
                objects[ref] = previous[ref]
                restored.append(previous[ref])
                # A restored object may itself reference deleted objects
                pending.append(previous[ref])

        return restored

    def get_restored_objects_as_string(self) -> Optional[str]:
        if not self.restored_objects:
            return None
        lines = [f"{obj.type}: {obj.name or obj.id} ({obj.id})" for obj in sorted(self.restored_objects, key=lambda o: o.id)]
        return "\n".join(lines)

    @staticmethod
    def _read(path: Path) -> dict:
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ModelLoadError(f"Cannot read {path}: {e}") from e
        if not isinstance(data, dict):
            raise ModelLoadError(f"Invalid model file {path}: expected a mapping")
        return data
