"""Groq API Proxy: a FastAPI backend that forwards chat completions to Groq."""

__version__ = "1.0.0"
