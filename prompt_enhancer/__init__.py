"""Prompt Enhancer - Rewrite rough prompts into clear, structured ones."""

__version__ = "0.1.0"
__app_name__ = "Prompt Enhancer"
