"""Craft Companion: a child-safe chat assistant for block-building games.

Children talk to the assistant in plain language.  Each message is
classified, enriched with a static knowledge base, turned into a structured
prompt for a locally hosted LLM, and the reply is parsed back into a chat
line and (optionally) a game command that must pass a multi-stage safety
gate before it reaches the game session.

Version Management
------------------
``__version__`` is read from the installed package metadata at import time.
The single source of truth is the ``version`` field in ``pyproject.toml``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version("craft_companion")
except PackageNotFoundError:
    __version__ = "0.3.0"
