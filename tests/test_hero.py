import base64
import pytest
from unittest.mock import AsyncMock, MagicMock

from app.core.concurrency import HERO_WIDGET
from app.exceptions import WidgetBusyError
from app.services.hero import (
    HeroService,
    STEP_CREATING_SCENE,
    STEP_PREPARING_AUDIO,
    hero_status,
    scene_prompt,
)


@pytest.fixture
def video():
    service = MagicMock()
    service.generate_scene_video = AsyncMock(return_value="/media/videos/video_1.mp4")
    return service


@pytest.fixture
def speech():
    service = MagicMock()
    service.generate_speech = AsyncMock(return_value=b"narration")
    return service


@pytest.fixture
def hero(video, speech):
    return HeroService(video=video, speech=speech)


def test_scene_prompt(story):
    prompt = scene_prompt(story)

    assert prompt.startswith(f"Cinematic, photorealistic shot of {story.title_prefix} {story.title_highlight} in the bible.")
    assert story.theme in prompt
    assert prompt.endswith("4k, atmospheric lighting, slow motion movement.")


@pytest.mark.asyncio
async def test_visualize_generates_video_then_narration(hero, video, speech, visitor):
    steps = []
    video.generate_scene_video.side_effect = lambda prompt: steps.append(visitor.loading_step) or "/media/videos/video_1.mp4"
    speech.generate_speech.side_effect = lambda text: steps.append(visitor.loading_step) or b"narration"

    result = await hero.visualize(visitor)

    assert steps == [STEP_CREATING_SCENE, STEP_PREPARING_AUDIO]
    assert result["video_url"] == "/media/videos/video_1.mp4"
    assert base64.b64decode(result["audio"]) == b"narration"
    assert result["audio_mime_type"] == "audio/mpeg"
    speech.generate_speech.assert_awaited_once_with(visitor.story.text)
    assert visitor.loading_step == ""
    assert HERO_WIDGET not in visitor.busy


@pytest.mark.asyncio
async def test_no_narration_without_video(hero, video, speech, visitor):
    video.generate_scene_video.return_value = None

    result = await hero.visualize(visitor)

    assert result == {"generated": False, "video_url": None, "audio": None, "audio_mime_type": None}
    speech.generate_speech.assert_not_called()


@pytest.mark.asyncio
async def test_replay_generates_a_new_scene(hero, video, speech, visitor):
    visitor.video_url = "/media/videos/earlier.mp4"
    video.generate_scene_video.return_value = "/media/videos/video_2.mp4"

    result = await hero.visualize(visitor)

    video.generate_scene_video.assert_awaited_once_with(scene_prompt(visitor.story))
    speech.generate_speech.assert_awaited_once_with(visitor.story.text)
    assert result["generated"] is True
    assert result["video_url"] == "/media/videos/video_2.mp4"
    assert visitor.video_url == "/media/videos/video_2.mp4"


@pytest.mark.asyncio
async def test_failed_replay_keeps_previous_video_without_narration(hero, video, speech, visitor):
    visitor.video_url = "/media/videos/earlier.mp4"
    video.generate_scene_video.return_value = None

    result = await hero.visualize(visitor)

    speech.generate_speech.assert_not_called()
    assert result == {
        "generated": False,
        "video_url": "/media/videos/earlier.mp4",
        "audio": None,
        "audio_mime_type": None,
    }


@pytest.mark.asyncio
async def test_unexpected_error_is_logged_and_flag_reset(hero, video, visitor):
    video.generate_scene_video.side_effect = RuntimeError("boom")

    result = await hero.visualize(visitor)

    assert result["video_url"] is None
    assert visitor.loading_step == ""
    assert HERO_WIDGET not in visitor.busy


@pytest.mark.asyncio
async def test_one_visualization_at_a_time(hero, video, visitor):
    visitor.busy.add(HERO_WIDGET)

    with pytest.raises(WidgetBusyError):
        await hero.visualize(visitor)

    video.generate_scene_video.assert_not_called()
    assert hero_status(visitor)["is_generating"] is True
