"""Recipe photo generation through the Imagen API.

One call per recipe name, one image per call, fixed prompt template and aspect
ratio. The image comes back as bytes; it is returned to the caller as a data URL
so the client can render it without a second fetch.

Calls are independent: the caller decides how a failure degrades. The HTTP
endpoint reports it as a 500, and the client fan-out turns it into "no image"
for that recipe only.
"""

import asyncio
import base64
from typing import Optional

import filetype
from google import genai
from google.genai import types

from headcook.prompts.prompts import build_image_prompt
from headcook.utils.config import config
from headcook.utils.errors import ImageGenerationError
from headcook.utils.logger import logger


def to_data_url(image_bytes: bytes, mime_type: Optional[str] = None) -> str:
    """Encode image bytes as a data URL.

    The MIME type is sniffed from magic bytes with filetype when not given, falling
    back to image/png.
    """
    if not mime_type:
        kind = filetype.guess(image_bytes)
        mime_type = kind.mime if kind is not None and kind.mime.startswith("image/") else "image/png"
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


class ImageGenerator:
    """Image-generation adapter: recipe name -> image URL."""

    def __init__(self, client: Optional[genai.Client] = None) -> None:
        self.client = client or genai.Client(api_key=config.GEMINI_API_KEY)
        self.model = config.IMAGE_MODEL
        self.aspect_ratio = config.IMAGE_ASPECT_RATIO
        self.timeout = config.IMAGE_TIMEOUT

    async def generate(self, recipe_name: str) -> str:
        """Generate one photo of the named recipe.

        Args:
            recipe_name: Recipe name embedded in the prompt template.

        Returns:
            Data URL of the generated image.

        Raises:
            ImageGenerationError: Call failed, timed out, or produced no image
                (for example when the prompt was safety-filtered).
        """
        prompt = build_image_prompt(recipe_name)

        try:
            response = await asyncio.wait_for(
                self.client.aio.models.generate_images(
                    model=self.model,
                    prompt=prompt,
                    config=types.GenerateImagesConfig(
                        number_of_images=1,
                        aspect_ratio=self.aspect_ratio,
                        output_mime_type="image/png",
                    ),
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Image generation timed out after {self.timeout}s for {recipe_name!r}")
            raise ImageGenerationError() from e
        except Exception as e:
            status = getattr(e, "code", None) or getattr(e, "status_code", None)
            logger.error(
                f"Image generation call failed for {recipe_name!r} (model={self.model}, status={status}): {e}",
                exc_info=True,
            )
            raise ImageGenerationError() from e

        generated = (response.generated_images or []) if response is not None else []
        image = generated[0].image if generated else None
        if image is None or not image.image_bytes:
            reason = generated[0].rai_filtered_reason if generated else None
            logger.warning(f"Image generation returned no image for {recipe_name!r} (filtered: {reason})")
            raise ImageGenerationError()

        logger.info(f"✓ Generated image for {recipe_name!r} ({len(image.image_bytes) / 1024:.1f} KB)")
        return to_data_url(image.image_bytes, image.mime_type)
