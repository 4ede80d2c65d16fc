"""LLM-facing agents: HTTP client, stream consumer, prompts."""
