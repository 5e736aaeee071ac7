"""Meme Captioner - burn top/bottom captions into uploaded images."""

__version__ = "1.0.0"
