"""Prompt templates and the formatter that wraps context and question."""

import logging

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = (
    "### System: You are an expert programmer named Lexie providing practical solutions. "
    "Always format code blocks with the appropriate language tag (e.g. ```javascript)."
)

CONTEXT_SECTION = """
Context files:
{context}"""

USER_SECTION = """

### User: {query}

### Assistant:"""


class PromptFormatter:
    """Builds the model-facing prompt: system, optional context, user, assistant marker.

    The ``###`` markers double as stop sequences for completion-style
    backends, so the order of the sections is fixed.
    """

    def __init__(self, system_prompt: str = SYSTEM_PROMPT):
        self.system_prompt = system_prompt

    def format(self, context: str, query: str) -> str:
        """Format context and question into the final prompt.

        The context section is left out entirely when ``context`` is empty
        or whitespace only.
        """
        context_section = ""
        if context and context.strip():
            context_section = CONTEXT_SECTION.format(context=context)

        prompt = self.system_prompt + context_section + USER_SECTION.format(query=query)

        logger.debug(
            "Formatted prompt: %d chars (has_context=%s)", len(prompt), bool(context_section)
        )
        return prompt
