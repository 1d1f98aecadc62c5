"""Prompt templates for the model-assisted extractor."""

from marketmail.prompts.extractor_prompt import EXTRACTOR_SYSTEM_PROMPT, build_extractor_prompt

__all__ = [
    "EXTRACTOR_SYSTEM_PROMPT",
    "build_extractor_prompt",
]
