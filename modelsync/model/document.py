# modelsync Model Document
# YAML-backed model with a flat-file working tree export

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Protocol

import yaml

from modelsync.errors import ModelLoadError
from modelsync.utils.paths import atomic_write


class ModelDocument(Protocol):
    """What the sync process needs from a document."""

    file: Optional[Path]

    def save(self) -> None:
        """Write the document to ``file``, which callers may reassign first."""
        ...

    def export_to_working_tree(self, working_tree: Path) -> None:
        """Serialize the in-memory document to flat files below working_tree."""
        ...

    def reload_from_working_tree(self, working_tree: Path) -> Optional[str]:
        """
        Replace the in-memory document with the flat files below working_tree.

        Returns:
            A human-readable listing of objects that had to be restored,
            or None if nothing was restored.
        """
        ...


@dataclass
class ModelObject:
    """One element or relation of a model."""

    id: str
    type: str
    name: str = ""
    properties: dict[str, Any] = field(default_factory=dict)
    refs: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "type": self.type, "name": self.name}
        if self.properties:
            data["properties"] = dict(self.properties)
        if self.refs:
            data["refs"] = list(self.refs)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ModelObject":
        if not isinstance(data, dict) or "id" not in data or "type" not in data:
            raise ModelLoadError(f"Invalid model object: {data!r}")
        return cls(
            id=str(data["id"]),
            type=str(data["type"]),
            name=str(data.get("name") or ""),
            properties=dict(data.get("properties") or {}),
            refs=[str(ref) for ref in data.get("refs") or []],
        )


class YamlModelDocument:
    """
    A model stored as a single YAML file.

    The document is edited in memory and saved to ``file``. For version
    control it is exported to one YAML file per object (see
    ``modelsync.model.exporter``) and reloaded from those files after a
    merge (see ``modelsync.model.loader``).
    """

    def __init__(
        self,
        file: Optional[Path] = None,
        *,
        model_id: str = "model",
        name: str = "",
        objects: Optional[list[ModelObject]] = None,
    ):
        self.file = file
        self.model_id = model_id
        self.name = name
        self.objects: dict[str, ModelObject] = {}
        for obj in objects or []:
            self.add(obj)

    @classmethod
    def load(cls, file: Path) -> "YamlModelDocument":
        """
        Load a document from its YAML file.

        Raises:
            ModelLoadError: If the file is missing or malformed.
        """
        if not file.is_file():
            raise ModelLoadError(f"Model file not found: {file}")

        try:
            with open(file, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ModelLoadError(f"Invalid model file {file}: {e}") from e

        if not isinstance(data, dict):
            raise ModelLoadError(f"Invalid model file {file}: expected a mapping")

        document = cls(file, model_id=str(data.get("id") or "model"), name=str(data.get("name") or ""))
        for obj_data in data.get("objects") or []:
            document.add(ModelObject.from_dict(obj_data))
        return document

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.model_id,
            "name": self.name,
            "objects": [obj.to_dict() for obj in self.sorted_objects()],
        }

    def save(self) -> None:
        """Write the document to its file."""
        if self.file is None:
            raise ModelLoadError("Model has no file to save to")
        content = yaml.safe_dump(self.to_dict(), default_flow_style=False, sort_keys=False, allow_unicode=True)
        atomic_write(self.file, content)

    def sorted_objects(self) -> list[ModelObject]:
        return [self.objects[key] for key in sorted(self.objects)]

    def get(self, object_id: str) -> Optional[ModelObject]:
        return self.objects.get(object_id)

    def add(self, obj: ModelObject) -> ModelObject:
        self.objects[obj.id] = obj
        return obj

    def remove(self, object_id: str) -> Optional[ModelObject]:
        return self.objects.pop(object_id, None)

    def replace_contents(self, model_id: str, name: str, objects: dict[str, ModelObject]) -> None:
        """Swap in a freshly loaded set of objects."""
        self.model_id = model_id
        self.name = name
        self.objects = dict(objects)

    def export_to_working_tree(self, working_tree: Path) -> None:
        from modelsync.model.exporter import ModelExporter

        ModelExporter(self).export(working_tree)

    def reload_from_working_tree(self, working_tree: Path) -> Optional[str]:
        from modelsync.model.loader import ModelLoader

        loader = ModelLoader(self)
        loader.load(working_tree)
        return loader.get_restored_objects_as_string()

    def __repr__(self) -> str:
        return f"YamlModelDocument(file={self.file!r}, objects={len(self.objects)})"
