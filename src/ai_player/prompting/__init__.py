"""Turns world snapshots into oracle instructions and situation text."""

from .assembler import DEFAULT_PRIORITIES, PolicyPriority, PromptPolicy, assemble, render_instructions, render_situation

__all__ = [
    "DEFAULT_PRIORITIES",
    "PolicyPriority",
    "PromptPolicy",
    "assemble",
    "render_instructions",
    "render_situation",
]
