"""Package loading for the dependency closure."""

from loader.go_list import (
    DEFAULT_BUILD_FLAGS,
    FILE_QUERY_PREFIX,
    GoListLoader,
    PackageLoader,
    order_variants,
)
from loader.models import GoListError, GoPackage

__all__ = [
    "DEFAULT_BUILD_FLAGS",
    "FILE_QUERY_PREFIX",
    "GoListError",
    "GoListLoader",
    "GoPackage",
    "PackageLoader",
    "order_variants",
]
