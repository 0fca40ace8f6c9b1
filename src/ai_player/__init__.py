"""Adaptive decision-gating engine that consults a tool-calling oracle for game play."""

__version__ = "1.0.0"
