"""Prompt text sent to the language model."""
