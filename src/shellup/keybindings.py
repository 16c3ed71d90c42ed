"""Key bindings installed with the advanced line-editing settings."""

from __future__ import annotations

from prompt_toolkit.filters import has_completions, has_suggestion
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.key_binding.key_processor import KeyPressEvent


def build_key_bindings() -> KeyBindings:
    """Create the shell's extra key bindings.

    - Ctrl-Space: open the completion menu
    - Ctrl-Right: accept the next word of the history suggestion
    - Escape: close the completion menu
    """
    kb = KeyBindings()

    @kb.add("c-space")
    def _(event: KeyPressEvent) -> None:
        buffer = event.current_buffer
        if buffer.complete_state:
            buffer.complete_next()
        else:
            buffer.start_completion(select_first=False)

    @kb.add("c-right", filter=has_suggestion)
    def _(event: KeyPressEvent) -> None:
        buffer = event.current_buffer
        suggestion = buffer.suggestion
        if suggestion is None:
            return
        # Leading whitespace plus one word
        text = suggestion.text
        stripped = text.lstrip()
        word = stripped.split(" ", 1)[0]
        buffer.insert_text(text[: len(text) - len(stripped) + len(word)])

    @kb.add("escape", filter=has_completions, eager=True)
    def _(event: KeyPressEvent) -> None:
        event.current_buffer.cancel_completion()

    return kb
