"""Dispatch-time command sanitizer and admin policy.

``CommandSanitizer.sanitize`` is the last check before a command reaches the
game session.  It looks only at the command verb (first token) and the
characters that could escape a file path:

1. Leading slashes are stripped; an empty result is rejected.
2. A verb in the always-blocked set is rejected for everyone.  Admin status
   never overrides it: ``op Steve`` is refused even for an admin.
3. A verb in the admin-only set is rejected unless the caller is an admin.
4. ``..`` or a backslash anywhere rejects the command.

Admin policy
------------
``AdminPolicy`` decides who counts as an admin.  With an explicit admin list
only those users are admins.  With an *empty* list every user is an admin
(``ADMIN_FAIL_OPEN``).  This keeps a freshly installed assistant usable on a
private server without configuration; set ``bot.admin_users`` to restrict
it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)

# Empty admin list → everyone is an admin.
ADMIN_FAIL_OPEN = True

_PATH_ESCAPES: tuple[str, ...] = ("..", "\\")


class AdminPolicy:
    """Answers "is this user an admin?"."""

    def __init__(self, admin_users: Iterable[str] = (), *, fail_open: bool = ADMIN_FAIL_OPEN):
        self._admins = frozenset(admin_users)
        self._fail_open = fail_open

    @property
    def restricted(self) -> bool:
        return bool(self._admins)

    def is_admin(self, username: str) -> bool:
        if not self._admins:
            return self._fail_open
        return username in self._admins


class CommandSanitizer:
    """Final verb-level filter applied to every dispatched command.

    Attributes:
        _always_blocked: Verbs nobody may run.
        _admin_only:     Verbs only admins may run.
    """

    def __init__(self, *, always_blocked: Iterable[str], admin_only: Iterable[str]) -> None:
        self._always_blocked = frozenset(verb.lower() for verb in always_blocked)
        self._admin_only = frozenset(verb.lower() for verb in admin_only)

    def sanitize(self, command: str, is_admin: bool) -> str | None:
        """Return the command ready to dispatch, or ``None`` if refused.

        Args:
            command:  Command text, with or without a leading slash.
            is_admin: Whether the requesting user is an admin.

        Returns:
            The command without leading slashes, or ``None``.
        """
        cleaned = command.strip().lstrip("/").strip()
        if not cleaned:
            return None

        verb = cleaned.split()[0].lower()
        if verb in self._always_blocked:
            logger.warning("Refusing always-blocked command: %s", cleaned)
            return None
        if verb in self._admin_only and not is_admin:
            logger.warning("Refusing admin-only command for non-admin: %s", cleaned)
            return None
        if any(marker in cleaned for marker in _PATH_ESCAPES):
            logger.warning("Refusing command with path characters: %s", cleaned)
            return None
        return cleaned
