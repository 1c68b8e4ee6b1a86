# modelsync Utilities Module
# Helper functions for path handling and content hashing

from modelsync.utils.hashing import (
    file_hash,
    read_checksum,
    write_checksum,
)
from modelsync.utils.paths import (
    atomic_write,
    ensure_dir,
    folder_name_from_url,
    get_unique_folder,
    is_empty_dir,
    remove_empty_dirs,
)

__all__ = [
    # Paths
    "ensure_dir",
    "atomic_write",
    "is_empty_dir",
    "remove_empty_dirs",
    "folder_name_from_url",
    "get_unique_folder",
    # Hashing
    "file_hash",
    "read_checksum",
    "write_checksum",
]
