"""
Warp - Generative Level Gateway

Moderates and validates access to a generative text service that produces
platformer levels and NPC dialog. The gateway provides:
- Per-caller admission control
- Dialog response caching
- Sanitization of untrusted player text
- Structured prompt construction
- Tolerant extraction and validation of generated levels
- Adaptive difficulty from observed player performance
"""

__version__ = "0.1.0"
