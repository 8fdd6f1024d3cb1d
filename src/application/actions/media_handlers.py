"""Media handlers: image generation and YouTube video search."""

from typing import TYPE_CHECKING, Any

from application.actions.base import ActionContext, ActionHandler
from domain.models import ActionResult

if TYPE_CHECKING:
    from infrastructure.adapters.image_generation_client import ImageGenerationClient
    from infrastructure.adapters.youtube_search_client import YoutubeSearchClient

YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v="


class GenerateImageHandler(ActionHandler):
    name = "generateImage"

    def __init__(self, persona: str, images: "ImageGenerationClient") -> None:
        super().__init__(persona)
        self._images = images

    async def execute(self, args: dict[str, Any], context: ActionContext) -> ActionResult:
        image_url = await self._images.generate(args.get("prompt", ""))
        return ActionResult(
            rim_type="image",
            response_system_prompt=self._prompt('Generate an answer in the line of "Here is the image you requested". Do not give details about the image.'),
            parameters={"imageUrl": image_url},
        )


class SearchYoutubeVideoHandler(ActionHandler):
    """Finds the best matching video; the persona quotes its title and description."""

    name = "searchYoutubeVideo"

    def __init__(self, persona: str, youtube: "YoutubeSearchClient", max_results: int = 1) -> None:
        super().__init__(persona)
        self._youtube = youtube
        self._max_results = max_results

    async def execute(self, args: dict[str, Any], context: ActionContext) -> ActionResult:
        items = await self._youtube.search_videos(args.get("prompt", ""), max_results=self._max_results)
        if not items:
            raise LookupError(f"No video found for '{args.get('prompt', '')}'")

        video = items[0]
        video_id = video["id"]["videoId"]
        snippet = video.get("snippet", {})
        title = snippet.get("title", "")
        description = snippet.get("description", "")
        return ActionResult(
            rim_type="video",
            response_system_prompt=self._prompt(
                f'Generate an answer in the line of "here is your video". This is the video title: {title}. This is the video description: {description}'
            ),
            parameters={
                "id": video_id,
                "url": f"{YOUTUBE_WATCH_URL}{video_id}",
                "title": title,
                "author": snippet.get("channelTitle", ""),
                "channelId": snippet.get("channelId", ""),
                "description": description,
            },
        )
