"""Safety gates between the child, the AI and the game."""

from craft_companion.safety.sanitizer import ADMIN_FAIL_OPEN, AdminPolicy, CommandSanitizer
from craft_companion.safety.validator import SafetyValidator, ValidationResult

__all__ = [
    "ADMIN_FAIL_OPEN",
    "AdminPolicy",
    "CommandSanitizer",
    "SafetyValidator",
    "ValidationResult",
]
