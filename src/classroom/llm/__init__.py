"""LLM client for the chat assistant."""
