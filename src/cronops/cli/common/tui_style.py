"""Questionary / prompt_toolkit theme for cronops.

Questionary uses prompt_toolkit under the hood. One style per prompt kind
keeps pickers, form fields and destructive confirmations visually distinct.
"""

from __future__ import annotations

from prompt_toolkit.styles import Style

QUESTIONARY_STYLE_SELECT = Style.from_dict(
    {
        "qmark": "bold ansicyan",
        "question": "bold ansibrightcyan",
        "answer": "bold ansigreen",
        "pointer": "bold ansigreen",
        "highlighted": "bold ansigreen",
        "selected": "bold ansigreen",
        "checkbox": "ansibrightblack",
        "checkbox-selected": "bold ansigreen",
        "separator": "ansibrightblack",
        "instruction": "ansibrightblack",
        "disabled": "ansibrightblack italic",
    }
)

# Free-text fields of the create/edit form.
QUESTIONARY_STYLE_FORM = Style.from_dict(
    {
        "qmark": "ansicyan",
        "question": "bold",
        "answer": "bold ansibrightcyan",
        "instruction": "ansibrightblack",
        "text": "ansiwhite",
    }
)

# Confirmations guard destructive or remote-mutating actions.
QUESTIONARY_STYLE_CONFIRM = Style.from_dict(
    {
        "qmark": "bold ansiyellow",
        "question": "bold ansiyellow",
        "answer": "bold ansired",
        "instruction": "ansibrightblack",
    }
)
