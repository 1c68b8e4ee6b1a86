# modelsync Model Module
# The document being synchronized and its flat-file export

from modelsync.model.document import ModelDocument, ModelObject, YamlModelDocument
from modelsync.model.exporter import METADATA_FILE, MODEL_FOLDER, ModelExporter
from modelsync.model.loader import ModelLoader

__all__ = [
    "ModelDocument",
    "ModelObject",
    "YamlModelDocument",
    "ModelExporter",
    "ModelLoader",
    "MODEL_FOLDER",
    "METADATA_FILE",
]
