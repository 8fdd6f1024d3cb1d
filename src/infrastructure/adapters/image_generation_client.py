"""OpenAI images client used by the generateImage action."""

import logging

import httpx

logger = logging.getLogger(__name__)


class ImageGenerationClient:
    """Generates one image per prompt and returns its URL."""

    def __init__(self, http_client: httpx.AsyncClient, api_key: str, url: str, model: str = "dall-e-3", size: str = "1024x1024") -> None:
        self._client = http_client
        self._api_key = api_key
        self._url = url
        self._model = model
        self._size = size

    async def generate(self, prompt: str) -> str:
        """Generate an image and return its URL.

        Raises:
            ValueError: If the prompt is empty or no URL came back
            httpx.HTTPError: If the images API fails
        """
        if not prompt:
            raise ValueError("No prompt provided")

        response = await self._client.post(
            self._url,
            json={"model": self._model, "prompt": prompt, "n": 1, "size": self._size},
            headers={"Authorization": f"Bearer {self._api_key}"},
        )
        response.raise_for_status()

        images = response.json().get("data") or []
        image_url = images[0].get("url") if images else None
        if not image_url:
            raise ValueError("No image url generated")

        logger.debug(f"🖼️ Image generated with {self._model}")
        return image_url
