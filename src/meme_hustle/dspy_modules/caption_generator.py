"""DSPy module for meme captions and vibes."""

import asyncio
from typing import Any, Optional, Sequence

import dspy

from ..config.config import Settings
from ..exceptions.base import ErrorCode, GeneratorError
from ..utils.logging import get_logger, log_performance

logger = get_logger(__name__)


class GenerateCaption(dspy.Signature):
    """You are a witty meme caption generator. Create a funny, short caption for a meme.
    Keep it under 100 characters."""

    title: str = dspy.InputField(desc="The title of the meme")
    tags: str = dspy.InputField(desc="Comma-separated tags describing the meme")

    caption: str = dspy.OutputField(desc="A funny caption, under 100 characters")


class DescribeVibe(dspy.Signature):
    """You are a cyberpunk vibe analyst. Describe the vibe of a meme in 3-4 words, cyberpunk style.
    Examples: "Neon Crypto Chaos", "Digital Dystopia Dreams"."""

    tags: str = dspy.InputField(desc="Comma-separated tags describing the meme")

    vibe: str = dspy.OutputField(desc="A 3-4 word cyberpunk vibe")


class CaptionGenerator(dspy.Module):
    """Generates captions and vibes through the configured language model.

    DSPy predictors are synchronous, so each call runs in a worker thread.
    Any failure, including an empty answer, surfaces as ``GeneratorError``.
    """

    def __init__(self, lm: Optional[dspy.LM] = None) -> None:
        super().__init__()
        self.lm = lm
        self.write_caption = dspy.Predict(GenerateCaption)
        self.describe_vibe = dspy.Predict(DescribeVibe)

    @classmethod
    def from_settings(cls, settings: Settings) -> "CaptionGenerator":
        """Build a generator for ``settings.dspy_model``."""
        if not settings.llm_api_key:
            logger.warning("llm_api_key_missing", model=settings.dspy_model)
            return cls(lm=None)

        logger.info("configuring_dspy", model=settings.dspy_model)
        lm = dspy.LM(settings.dspy_model, api_key=settings.llm_api_key.get_secret_value())
        return cls(lm=lm)

    @property
    def configured(self) -> bool:
        return self.lm is not None

    def _predict(self, predictor: dspy.Predict, field: str, **inputs: Any) -> str:
        if self.lm is None:
            raise GeneratorError("No language model configured")

        try:
            with dspy.context(lm=self.lm):
                prediction = predictor(**inputs)
        except Exception as e:
            raise GeneratorError(f"Generation failed: {e}", original_error=e)

        logger.debug("dspy_prediction", prediction=str(prediction))
        text = (getattr(prediction, field, None) or "").strip().strip('"').strip()
        if not text:
            raise GeneratorError(
                f"Language model returned an empty {field}", ErrorCode.GENERATOR_EMPTY_RESPONSE
            )
        return text

    @log_performance
    async def generate_caption(self, title: str, tags: Sequence[str]) -> str:
        """
        Write a caption for a meme.

        Args:
            title: Meme title
            tags: Meme tags

        Returns:
            The generated caption

        Raises:
            GeneratorError: If generation fails
        """
        return await asyncio.to_thread(
            self._predict, self.write_caption, "caption", title=title, tags=", ".join(tags)
        )

    @log_performance
    async def generate_vibe(self, tags: Sequence[str]) -> str:
        """
        Describe a meme's vibe.

        Args:
            tags: Meme tags

        Returns:
            The generated vibe

        Raises:
            GeneratorError: If generation fails
        """
        return await asyncio.to_thread(
            self._predict, self.describe_vibe, "vibe", tags=", ".join(tags)
        )

    async def check_connection(self) -> str:
        """Make one small generation call to confirm the model is reachable."""
        return await self.generate_caption("Test connection", ["funny"])
