import os
import pytest
from unittest.mock import patch, AsyncMock, MagicMock

from app.exceptions import VideoGenerationError
from app.services.video_service import VideoService


@pytest.fixture
def video_service(tmp_path):
    """Provides a VideoService writing into a temporary media directory."""
    service = VideoService()
    service.output_dir = str(tmp_path / "videos")
    service.poll_interval = 0
    return service


def create_async_mock_response(status, json_data=None, text_data="", content=b""):
    """Helper to create a mock aiohttp response object that is also an async context manager."""
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.json = AsyncMock(return_value=json_data)
    mock_response.text = AsyncMock(return_value=text_data)
    mock_response.read = AsyncMock(return_value=content)
    mock_response.__aenter__.return_value = mock_response
    mock_response.__aexit__ = AsyncMock(return_value=None)
    return mock_response


def test_initialization(video_service: VideoService):
    assert video_service.api_key
    assert video_service.headers["Authorization"].startswith("Bearer ")


@pytest.mark.asyncio
@patch('app.services.video_service.aiohttp.ClientSession')
async def test_generate_scene_video_success(mock_session_cls, video_service: VideoService):
    submitted = create_async_mock_response(200, {"id": "video_123", "status": "queued"})
    in_progress = create_async_mock_response(200, {"id": "video_123", "status": "in_progress", "progress": 40})
    completed = create_async_mock_response(200, {"id": "video_123", "status": "completed", "progress": 100})
    download = create_async_mock_response(200, content=b"\x00\x00\x00\x18ftypmp42")

    mock_session = mock_session_cls.return_value.__aenter__.return_value
    mock_session.post = MagicMock(return_value=submitted)
    mock_session.get = MagicMock(side_effect=[in_progress, completed, download])

    url = await video_service.generate_scene_video("Cinematic burning bush")

    assert url == "/media/videos/video_123.mp4"
    with open(os.path.join(video_service.output_dir, "video_123.mp4"), "rb") as f:
        assert f.read() == b"\x00\x00\x00\x18ftypmp42"

    payload = mock_session.post.call_args.kwargs['json']
    assert payload['prompt'] == "Cinematic burning bush"
    assert payload['model'] == video_service.model
    assert mock_session.get.call_args_list[-1].args[0].endswith("/videos/video_123/content")


@pytest.mark.asyncio
@patch('app.services.video_service.aiohttp.ClientSession')
async def test_failed_job_returns_none(mock_session_cls, video_service: VideoService):
    submitted = create_async_mock_response(200, {"id": "video_9", "status": "queued"})
    failed = create_async_mock_response(
        200, {"id": "video_9", "status": "failed", "error": {"message": "moderation_blocked"}}
    )

    mock_session = mock_session_cls.return_value.__aenter__.return_value
    mock_session.post = MagicMock(return_value=submitted)
    mock_session.get = MagicMock(side_effect=[failed])

    assert await video_service.generate_scene_video("a prompt") is None

    mock_session.get = MagicMock(side_effect=[failed])
    with pytest.raises(VideoGenerationError, match="moderation_blocked"):
        await video_service.create_video("a prompt")


@pytest.mark.asyncio
@patch('app.services.video_service.aiohttp.ClientSession')
async def test_submission_api_error(mock_session_cls, video_service: VideoService):
    mock_response = create_async_mock_response(400, text_data="Invalid size")

    mock_session = mock_session_cls.return_value.__aenter__.return_value
    mock_session.post = MagicMock(return_value=mock_response)

    with pytest.raises(VideoGenerationError, match="API request failed: 400 - Invalid size"):
        await video_service.create_video("a prompt that will fail")


@pytest.mark.asyncio
@patch('app.services.video_service.aiohttp.ClientSession')
async def test_submission_rate_limit_retry(mock_session_cls, video_service: VideoService):
    rate_limited = create_async_mock_response(429, text_data="Rate limit exceeded")
    submitted = create_async_mock_response(200, {"id": "video_7", "status": "completed"})
    download = create_async_mock_response(200, content=b"mp4")

    mock_session = mock_session_cls.return_value.__aenter__.return_value
    mock_session.post = MagicMock(side_effect=[rate_limited, submitted])
    mock_session.get = MagicMock(return_value=download)

    with patch('app.services.video_service.asyncio.sleep', new_callable=AsyncMock) as mock_sleep:
        filename = await video_service.create_video("a prompt")

    assert filename == "video_7.mp4"
    assert mock_session.post.call_count == 2
    mock_sleep.assert_called_once_with(1)


@pytest.mark.asyncio
async def test_missing_api_key_returns_none(video_service: VideoService):
    video_service.api_key = ""
    assert await video_service.generate_scene_video("a prompt") is None


@pytest.mark.asyncio
@patch('app.services.video_service.aiohttp.ClientSession')
async def test_poll_timeout(mock_session_cls, video_service: VideoService):
    video_service.timeout = -1
    submitted = create_async_mock_response(200, {"id": "video_slow", "status": "queued"})

    mock_session = mock_session_cls.return_value.__aenter__.return_value
    mock_session.post = MagicMock(return_value=submitted)

    with pytest.raises(VideoGenerationError, match="timed out"):
        await video_service.create_video("a prompt")
