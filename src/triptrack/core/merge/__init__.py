"""Default dataset merge engine."""

from triptrack.core.merge.engine import merge
from triptrack.core.merge.seed import default_seed

__all__ = ["default_seed", "merge"]
