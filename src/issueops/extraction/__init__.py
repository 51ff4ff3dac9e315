"""Action extraction at the system boundary."""

from .extractor import extract_action, extract_all_actions, is_confirmation

__all__ = ["extract_action", "extract_all_actions", "is_confirmation"]
