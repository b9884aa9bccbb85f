from __future__ import annotations

"""Assembly of the ordered message list sent to the generation backend."""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .prompt_loader import AVOID_EMOJIS_FILE, SYSTEM_PROMPT_FILE, fill_prompt, load_prompt
from .tables import HISTORY_WINDOW
from .utils import extract_emojis

logger = logging.getLogger("chat_ai.composer")

DEFAULT_AVOID_EMOJIS_TEMPLATE = (
    "Não use estes emojis nesta resposta: {emojis}. "
    "Varie, e se for usar emojis, escolha outros que façam sentido (máx. 2)."
)


class PromptTemplates:
    """System and anti-repetition templates read from the prompts directory."""

    def __init__(self, prompts_dir: Path) -> None:
        self._prompts_dir = prompts_dir
        self.system = load_prompt(prompts_dir / SYSTEM_PROMPT_FILE).strip()
        avoid_path = prompts_dir / AVOID_EMOJIS_FILE
        if avoid_path.exists():
            self.avoid_emojis = load_prompt(avoid_path).strip()
        else:
            self.avoid_emojis = DEFAULT_AVOID_EMOJIS_TEMPLATE

    def render_system(self, context: str) -> str:
        return fill_prompt(self.system, context=context)


def recent_history(history: Sequence[Dict[str, str]], window: int = HISTORY_WINDOW) -> List[Dict[str, str]]:
    """Return the trailing `window` turns as fresh role/content dicts."""
    if window <= 0:
        return []
    return [
        {"role": str(turn.get("role", "")), "content": turn.get("content") or ""}
        for turn in list(history)[-window:]
    ]


def last_assistant_emojis(history: Sequence[Dict[str, str]]) -> List[str]:
    """Emojis used by the most recent assistant turn, or an empty list."""
    for turn in reversed(history):
        if turn.get("role") == "assistant":
            return extract_emojis(turn.get("content") or "")
    return []


def compose_messages(
    system_prompt: str,
    history: Sequence[Dict[str, str]],
    user_message: str,
    avoid_emojis_template: Optional[str] = None,
    window: int = HISTORY_WINDOW,
) -> List[Dict[str, str]]:
    """Purpose: Build the ordered chat messages for one generation call.
    Inputs/Outputs: Inputs are the rendered system prompt, prior turns, the current
        message, and the anti-repetition template; output is a list of role/content dicts.
    Side Effects / State: None on inputs; logs the avoided emojis.
    Dependencies: Uses recent_history, last_assistant_emojis, and fill_prompt.
    Failure Modes: None; missing history content is treated as empty text.
    If Removed: The backend receives neither context nor conversation memory.
    Testing Notes: Order is system, history window, optional emoji directive, user;
        never more than window + 3 entries.
    """
    # Fixed order: system, trailing history, emoji directive, current turn.
    messages: List[Dict[str, str]] = [{"role": "system", "content": system_prompt}]
    window_turns = recent_history(history, window)
    messages.extend(window_turns)

    avoid = last_assistant_emojis(window_turns)
    if avoid:
        avoid_list = " ".join(avoid)
        template = avoid_emojis_template or DEFAULT_AVOID_EMOJIS_TEMPLATE
        messages.append({"role": "system", "content": fill_prompt(template, emojis=avoid_list)})
        logger.info("avoiding emojis from last answer: %s", avoid_list)

    messages.append({"role": "user", "content": user_message})
    return messages
