"""Minimal Minecraft Java Edition console chat client."""

__version__ = "0.1.0"
