"""
Hero "Visualize Scene": generate a scene video, then narrate the passage.
"""

import base64
from typing import Any, Dict, Optional

from app.core.concurrency import HERO_WIDGET, widget_guard
from app.core.logger_config import setup_logger
from app.models.story_models import StoryData
from app.services.session_store import VisitorSession
from app.services.speech_service import SpeechService, speech_service
from app.services.video_service import VideoService, video_service

logger = setup_logger(__name__)

STEP_CREATING_SCENE = "Creating scene..."
STEP_PREPARING_AUDIO = "Preparing audio..."


def scene_prompt(story: StoryData) -> str:
    return (
        f"Cinematic, photorealistic shot of {story.title_prefix} {story.title_highlight} in the bible. "
        f"{story.theme}. 4k, atmospheric lighting, slow motion movement."
    )


def hero_status(session: VisitorSession) -> Dict[str, Any]:
    return {
        "is_generating": HERO_WIDGET in session.busy,
        "loading_step": session.loading_step,
        "video_url": session.video_url,
        "background_image": session.story.background_image,
    }


class HeroService:
    def __init__(self, video: VideoService = None, speech: SpeechService = None):
        self.video = video or video_service
        self.speech = speech or speech_service

    async def visualize(self, session: VisitorSession) -> Dict[str, Any]:
        """
        Produce the hero video and narration for the session's story.

        Every call ("Visualize Scene" and "Replay Narration" alike) generates
        a fresh scene. Narration is only requested when that generation
        returns a video; on failure the previous video stays in place.
        """
        story = session.story
        narration: Optional[bytes] = None
        generated = False

        async with widget_guard(session.busy, HERO_WIDGET):
            try:
                session.loading_step = STEP_CREATING_SCENE
                video_url = await self.video.generate_scene_video(scene_prompt(story))

                if video_url:
                    generated = True
                    session.video_url = video_url
                    session.loading_step = STEP_PREPARING_AUDIO
                    narration = await self.speech.generate_speech(story.text)
            except Exception as e:
                logger.error(f"Visualization failed: {e}")
            finally:
                session.loading_step = ""

        return {
            "generated": generated,
            "video_url": session.video_url,
            "audio": base64.b64encode(narration).decode("ascii") if narration else None,
            "audio_mime_type": "audio/mpeg" if narration else None,
        }


hero_service = HeroService()
