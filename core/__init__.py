"""Gemini API client."""
