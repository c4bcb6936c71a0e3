"""Structured prompt composer.

Turns an ``Analysis`` into the single text prompt sent to the AI
collaborator.  The composer only assembles text; it validates nothing.  The
safety gates run before and after the AI call, in ``craft_companion.safety``.

Section order (fixed)
---------------------
1. Child-safety preamble.
2. Knowledge excerpt, scoped to the intent:
   - item slices for ``give`` or when items were mentioned;
   - animal slices for ``build`` or when animals were mentioned;
   - building materials for ``build``;
   - the safe and blocked command lists, always.
3. Reasoning scaffold, four steps: understand the request, validate it
   against the knowledge base, safety check, create the response.
4. Output-format directive: exactly two tagged lines, ``CHAT:`` and
   ``COMMAND:``.  ``ResponseParser`` relies on these tags.
5. Request context: player name, message, optional position and optional
   matched structure, interpolated verbatim.

The excerpt is bounded: each category contributes a fixed-size slice rather
than its full list, so prompt size does not grow with the knowledge base.
"""

from __future__ import annotations

from craft_companion.core.session import Position
from craft_companion.interpret.analyzer import Analysis
from craft_companion.knowledge.catalog import KnowledgeBase, default_knowledge_base

SAFETY_PREAMBLE = """\
MINECRAFT AI ASSISTANT FOR KIDS

You are a super friendly Minecraft helper talking to a child! Always be:
- Kind, encouraging, and patient like a helpful big sibling
- Use simple words that kids understand
- Make everything sound fun and exciting with emojis!
- Be positive and never just say "no"; suggest a fun alternative instead
- If something isn't possible, redirect to something cool they CAN do

SAFETY RULES:
- NEVER suggest items that don't exist in Minecraft Bedrock
- ONLY use commands from the safe command list provided
- If asked for something inappropriate, suggest a fun Minecraft activity instead
- Always validate items and entities against the knowledge base before suggesting them"""

OUTPUT_FORMAT_DIRECTIVE = """\
OUTPUT FORMAT:
Reply with exactly two lines and nothing else:
CHAT: [Friendly message to the child]
COMMAND: [Exact Minecraft command to run, or leave empty if no command is needed]"""

# Slice sizes for the knowledge excerpt.
_ITEM_SLICES: tuple[tuple[str, str, int], ...] = (
    ("Tools", "tools", 10),
    ("Armor", "armor", 8),
    ("Blocks", "blocks", 10),
    ("Food", "food", 8),
    ("Special", "special", 8),
)
_ENTITY_SLICE = 15


def _listing(values: list[str] | tuple[str, ...] | list[int]) -> str:
    return ", ".join(str(value) for value in values) if values else "none"


def format_position(position: Position) -> str:
    """Render a position as ``x, y, z`` without rounding."""
    return f"{position.x}, {position.y}, {position.z}"


class PromptComposer:
    """Assembles the structured prompt for one message."""

    def __init__(self, knowledge: KnowledgeBase | None = None) -> None:
        self._kb = knowledge or default_knowledge_base()

    def compose(
        self,
        analysis: Analysis,
        player_name: str,
        message: str,
        player_position: Position | None = None,
        matched_structure: str | None = None,
    ) -> str:
        """Build the full prompt text.

        Args:
            analysis:          Analyzer output for ``message``.
            player_name:       Name of the child, used verbatim.
            message:           The cleaned message text.
            player_position:   Player position if the transport knows it.
            matched_structure: Structure asset resolved for a build request.

        Returns:
            Prompt text with all five sections in fixed order.
        """
        sections = [
            SAFETY_PREAMBLE,
            self.knowledge_excerpt(analysis),
            self.reasoning_scaffold(analysis, player_name),
            OUTPUT_FORMAT_DIRECTIVE,
            self.request_context(player_name, message, player_position, matched_structure),
        ]
        return "\n\n".join(sections)

    def knowledge_excerpt(self, analysis: Analysis) -> str:
        kb = self._kb
        lines = ["MINECRAFT KNOWLEDGE BASE:"]

        if analysis.intent == "give" or analysis.items:
            lines.append("")
            lines.append("VALID ITEMS YOU CAN GIVE:")
            for label, category, size in _ITEM_SLICES:
                lines.append(f"{label}: {', '.join(kb.items.get(category, ())[:size])}...")

        if analysis.intent == "build" or analysis.animals:
            lines.append("")
            lines.append("ANIMALS YOU CAN SUMMON:")
            lines.append(f"Farm Animals: {', '.join(kb.animal_habitats.get('farm', ()))}")
            lines.append(f"Forest Animals: {', '.join(kb.animal_habitats.get('forest', ()))}")
            lines.append(f"All Valid Entities: {', '.join(kb.entities[:_ENTITY_SLICE])}...")

        if analysis.intent == "build":
            lines.append("")
            lines.append("BUILDING MATERIALS:")
            for category, materials in kb.building_materials.items():
                lines.append(f"{category.title()}: {', '.join(materials)}")

        lines.append("")
        lines.append(f"SAFE COMMANDS YOU CAN USE: {', '.join(kb.safe_commands)}")
        lines.append(f"NEVER USE THESE BLOCKED COMMANDS: {', '.join(kb.blocked_commands)}")
        return "\n".join(lines)

    def reasoning_scaffold(self, analysis: Analysis, player_name: str) -> str:
        return "\n".join(
            [
                "THINK IT THROUGH STEP BY STEP:",
                "",
                "STEP 1 - UNDERSTAND THE REQUEST:",
                f"- Command Type: {analysis.intent}",
                f"- Items Mentioned: {_listing(analysis.items)}",
                f"- Animals Mentioned: {_listing(analysis.animals)}",
                f"- Structures Mentioned: {_listing(analysis.structures)}",
                f"- Colors Mentioned: {_listing(analysis.colors)}",
                f"- Numbers: {_listing(analysis.numbers)}",
                f"- Child's Mood: {analysis.sentiment}"
                + (" (in a hurry)" if analysis.urgency else ""),
                "",
                "STEP 2 - VALIDATE AGAINST MINECRAFT KNOWLEDGE:",
                "- Check that every mentioned item exists in Minecraft Bedrock",
                "- Verify that every entity is valid",
                "- If something doesn't exist, pick a similar valid alternative",
                "",
                "STEP 3 - SAFETY CHECK:",
                "- Is this request safe and appropriate for a child?",
                "- Are all items and commands in the allowed lists?",
                "",
                "STEP 4 - CREATE RESPONSE:",
                f'- A friendly message to the child, using their name "{player_name}"',
                "- The exact Minecraft command to execute, without any blocked command",
                "- If the request can't be fulfilled exactly, offer something similar and fun",
            ]
        )

    def request_context(
        self,
        player_name: str,
        message: str,
        player_position: Position | None,
        matched_structure: str | None,
    ) -> str:
        lines = [
            "REQUEST:",
            f"Player: {player_name}",
            f'Message: "{message}"',
        ]
        if player_position is not None:
            lines.append(f"Position: {format_position(player_position)}")
        if matched_structure:
            lines.append(f"Available structure for this request: {matched_structure}")
        lines.append("")
        lines.append("Now process this request:")
        return "\n".join(lines)
