"""Message interpretation for the chat pipeline.

Turns a child's free-text message into a structured prompt, sends it to the
AI collaborator, and reads the reply back.  Nothing here decides whether a
command is safe; that is ``craft_companion.safety``.

Package structure
-----------------
intent.py       categorize()        ordered keyword rules → coarse intent.
analyzer.py     RequestAnalyzer     items, animals, colours, numbers, mood.
structures.py   StructureMatcher    free text → available structure asset.
prompt.py       PromptComposer      analysis → structured prompt text.
renderer.py     OllamaRenderer      async client for Ollama /api/chat.
parser.py       parse_response()    tagged reply → chat + command.
"""

from craft_companion.interpret.analyzer import Analysis, RequestAnalyzer
from craft_companion.interpret.intent import INTENT_RULES, Intent, categorize
from craft_companion.interpret.parser import ParsedResponse, parse_response
from craft_companion.interpret.prompt import PromptComposer
from craft_companion.interpret.renderer import OllamaRenderer
from craft_companion.interpret.structures import StructureMatcher, discover_structures

__all__ = [
    "Analysis",
    "INTENT_RULES",
    "Intent",
    "OllamaRenderer",
    "ParsedResponse",
    "PromptComposer",
    "RequestAnalyzer",
    "StructureMatcher",
    "categorize",
    "discover_structures",
    "parse_response",
]
