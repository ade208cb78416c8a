"""Gemini routes."""
