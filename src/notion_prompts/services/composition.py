"""Template substitution and result wrapping.

Placeholders use ``{{TOKEN}}`` syntax. Substitution is a single left-to-right
pass over the template, so text inserted for one placeholder (notably the
user's input) is never scanned for further placeholders.
"""

import re
from datetime import datetime

from notion_prompts.entities import HandlingMode, HandlingResult

PLACEHOLDER_PATTERN = re.compile(r"\{\{([A-Za-z0-9_]+)\}\}")

USER_INPUT = "USER_INPUT"

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M:%S"
DATETIME_FORMAT = f"{DATE_FORMAT} {TIME_FORMAT}"

NO_FURTHER_PROCESSING = "NO_FURTHER_PROCESSING_REQUIRED"
PROCESS_WITH_CURRENT_LLM = "PROCESS_WITH_CURRENT_LLM"

NOT_IMPLEMENTED_TEXT = "Not implemented: processing prompts through an external API"


def context_variables(prompt_name: str, now: datetime) -> dict[str, str]:
    """Contextual placeholder values, resolved after the user input."""
    return {
        "CURRENT_DATE": now.strftime(DATE_FORMAT),
        "CURRENT_TIME": now.strftime(TIME_FORMAT),
        "CURRENT_DATETIME": now.strftime(DATETIME_FORMAT),
        "PROMPT_NAME": prompt_name,
    }


def render_template(
    template: str,
    user_input: str,
    prompt_name: str,
    now: datetime | None = None,
) -> str:
    """Substitute recognised placeholders in a template.

    Args:
        template: Template text
        user_input: Inserted verbatim for every ``{{USER_INPUT}}``
        prompt_name: Value of ``{{PROMPT_NAME}}``
        now: Clock reading for the date/time placeholders. Defaults to now.

    Returns:
        The composed text. Unrecognised placeholders are left as-is.
    """
    variables = {USER_INPUT: user_input}
    variables.update(context_variables(prompt_name, now or datetime.now()))

    def replace(match: re.Match[str]) -> str:
        return variables.get(match.group(1), match.group(0))

    return PLACEHOLDER_PATTERN.sub(replace, template)


def handle_composed(text: str, mode: HandlingMode) -> HandlingResult:
    """Wrap composed text according to a handling mode.

    Args:
        text: The composed prompt
        mode: Effective handling mode

    Returns:
        HandlingResult carrying the text and processing hints
    """
    if mode is HandlingMode.RETURN_ONLY:
        return HandlingResult(
            text=text,
            metadata={
                "processing_instruction": NO_FURTHER_PROCESSING,
                "description": "This prompt is returned for reference only; "
                "the model should not act on it directly",
            },
        )

    if mode is HandlingMode.PROCESS_LOCALLY:
        return HandlingResult(
            text=text,
            metadata={
                "processing_instruction": PROCESS_WITH_CURRENT_LLM,
                "description": "Process this prompt with the current model context",
            },
        )

    # CALL_EXTERNAL_API is declared but has no backend yet
    return HandlingResult(text=NOT_IMPLEMENTED_TEXT)
