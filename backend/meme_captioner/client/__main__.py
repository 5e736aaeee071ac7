"""
Command-line front end for the upload form.

Usage:
    python -m meme_captioner.client photo.jpg --top "one does not simply" --bottom "write memes" -o out/
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from meme_captioner.client.api import MemeApiClient, SelectedImage
from meme_captioner.client.form import MemeForm

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meme-client",
        description="Caption an image with the Meme Generator API.",
    )
    parser.add_argument("image", help="Path to a JPEG, PNG or WebP image")
    parser.add_argument("--top", default="", help="Top caption")
    parser.add_argument("--bottom", default="", help="Bottom caption")
    parser.add_argument("-o", "--output-dir", default=".", help="Where to save the meme")
    parser.add_argument("--api-url", default=None, help="Overrides API_BASE_URL")
    return parser


async def run(args: argparse.Namespace) -> int:
    form = MemeForm(api_client=MemeApiClient(base_url=args.api_url))
    try:
        form.select_image(SelectedImage.from_path(args.image))
    except OSError as e:
        print(f"Cannot read image: {e}", file=sys.stderr)
        return 1
    form.set_text("top_text", args.top)
    form.set_text("bottom_text", args.bottom)

    if await form.submit() is None:
        print(form.state.error, file=sys.stderr)
        return 1

    try:
        path = form.download(args.output_dir)
    except OSError as e:
        print(f"Cannot save meme: {e}", file=sys.stderr)
        return 1
    print(path)
    form.reset()
    return 0


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Console entry point."""
    logging.basicConfig(level=logging.WARNING, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    args = build_parser().parse_args(argv)
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
