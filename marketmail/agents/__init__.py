"""Agent implementations for the extraction core.

Each agent makes a fresh, self-contained LLM call for one email, so no
data from one submission leaks into another.
"""

from marketmail.agents.model_extractor import StructuredCompleter, extract_with_model

__all__ = [
    "StructuredCompleter",
    "extract_with_model",
]
