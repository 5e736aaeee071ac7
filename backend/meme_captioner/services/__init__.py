# Services package - upload validation and caption compositing
from meme_captioner.services.compositor import MemeCompositor
from meme_captioner.services.uploads import UploadValidator

__all__ = [
    "MemeCompositor",
    "UploadValidator",
]
