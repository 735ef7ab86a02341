"""DSPy modules for generated meme content."""

from .caption_generator import CaptionGenerator, DescribeVibe, GenerateCaption

__all__ = ["CaptionGenerator", "DescribeVibe", "GenerateCaption"]
