"""
Rendering of conversation contexts into prompt text.
"""

from .types import ConversationContext


SUMMARY_HEADER = "CONVERSATION HISTORY (summarized):"
RECENT_HEADER = "RECENT CONVERSATION:"
SECTION_SEPARATOR = "\n\n---\n\n"


def format_context_for_instructions(context: ConversationContext) -> str:
    """
    Format a conversation context for inclusion in realtime instructions.

    Sections without content are left out entirely.
    """
    parts = []

    if context.summary:
        parts.append(SUMMARY_HEADER)
        parts.append(context.summary)
        parts.append("")

    if context.recent_messages:
        parts.append(RECENT_HEADER)
        for msg in context.recent_messages:
            parts.append(f"{msg.label}: {msg.text}")

    return "\n".join(parts)


def append_context_to_instructions(instructions: str, context_text: str) -> str:
    """
    Append rendered conversation history to a persona instruction block.

    Returns the instructions unchanged when there is no history yet.
    """
    if not context_text:
        return instructions
    return f"{instructions}{SECTION_SEPARATOR}{context_text}"
