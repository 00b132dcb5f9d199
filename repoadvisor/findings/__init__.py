"""Finding rules and the generator that evaluates them."""

from .generator import MAX_AFFECTED_FILES, FindingGenerator
from .rules import BUILTIN_RULES, FindingRule

__all__ = ["BUILTIN_RULES", "FindingGenerator", "FindingRule", "MAX_AFFECTED_FILES"]
