"""Import and signature rewriting for Go compilation units."""

from rewrite.imports import (
    RewriteResult,
    add_import,
    delete_import,
    drop_unused_import,
    has_import,
    replace_import_path,
    rewrite_import_path,
    write_tree,
)
from rewrite.params import retarget_parameter_qualifier

__all__ = [
    "RewriteResult",
    "add_import",
    "delete_import",
    "drop_unused_import",
    "has_import",
    "replace_import_path",
    "retarget_parameter_qualifier",
    "rewrite_import_path",
    "write_tree",
]
