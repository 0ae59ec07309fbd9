#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Internal helpers shared by the engine and the dispatcher."""

from cmark_batch.utils.decorators import debug_timer, requires_dependencies
from cmark_batch.utils.packages import check_version_requirement, get_package_version

__all__ = ["debug_timer", "requires_dependencies", "check_version_requirement", "get_package_version"]
