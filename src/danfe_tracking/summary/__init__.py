from .gemini import GeminiSummarizer, Summarizer
from .prompt import build_prompt, format_for_prompt

__all__ = ["GeminiSummarizer", "Summarizer", "build_prompt", "format_for_prompt"]
