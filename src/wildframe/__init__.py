"""Wildframe - cinematic wildlife prompt sequences with Gemini and Imagen."""

__version__ = "0.1.0"
