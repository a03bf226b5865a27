"""
Scene video generation through the OpenAI videos API.

A generation is a job: it is submitted, polled until it completes or fails,
and the finished MP4 is downloaded into the media directory so the page can
play it from ``/media/videos``.
"""

import asyncio
import os
import time
from typing import Any, Dict, Optional

import aiohttp

from app.core.concurrency import VIDEO_SEMAPHORE, with_concurrency_limit
from app.core.config import settings
from app.core.logger_config import setup_logger
from app.exceptions import ConfigurationError, VideoGenerationError

logger = setup_logger(__name__)

FINISHED_STATUSES = {"completed", "failed", "cancelled"}


class VideoService:
    """
    Service for generating short cinematic scenes from a text prompt.
    """

    def __init__(self):
        self.api_key = settings.OPENAI_API_KEY
        self.base_url = settings.OPENAI_BASE_URL.rstrip("/")
        self.model = settings.VIDEO_MODEL
        self.size = settings.VIDEO_SIZE
        self.seconds = settings.VIDEO_SECONDS
        self.poll_interval = settings.VIDEO_POLL_INTERVAL_SECONDS
        self.timeout = settings.VIDEO_TIMEOUT_SECONDS
        self.output_dir = settings.videos_dir
        self.max_retries = 3

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    async def create_video(self, prompt: str) -> str:
        """
        Run one generation job to completion and return the stored file name.

        Raises:
            VideoGenerationError: the job failed, timed out, or the API refused it.
        """
        if not self.api_key:
            raise ConfigurationError("OPENAI_API_KEY is required for video generation")

        logger.info(f"Starting scene video generation with {self.model} ({self.size}, {self.seconds}s)")
        logger.info(f"Prompt: {prompt[:100]}...")

        client_timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            job = await self._submit_job(session, prompt)
            job = await self._wait_for_job(session, job)
            content = await self._download_content(session, job["id"])

        return await self._store(job["id"], content)

    async def _submit_job(self, session: aiohttp.ClientSession, prompt: str) -> Dict[str, Any]:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "size": self.size,
            "seconds": self.seconds,
        }

        for attempt in range(self.max_retries):
            try:
                async with session.post(
                    f"{self.base_url}/videos",
                    headers=self.headers,
                    json=payload
                ) as response:
                    if response.status == 200:
                        job = await response.json()
                        if not job.get("id"):
                            raise VideoGenerationError("No job id returned from videos API")
                        logger.info(f"Video job {job['id']} submitted (status {job.get('status')})")
                        return job
                    elif response.status == 429:
                        wait_time = 2 ** attempt
                        logger.warning(f"Rate limited, waiting {wait_time}s before retry {attempt + 1}")
                        await asyncio.sleep(wait_time)
                        continue
                    else:
                        error_text = await response.text()
                        logger.error(f"Video job submission failed: {response.status} - {error_text}")
                        raise VideoGenerationError(f"API request failed: {response.status} - {error_text}")
            except aiohttp.ClientError as e:
                if attempt == self.max_retries - 1:
                    raise VideoGenerationError(f"Network error: {str(e)}")
                logger.warning(f"Network error on attempt {attempt + 1}, retrying...")
                await asyncio.sleep(1)

        raise VideoGenerationError("Video job submission failed after maximum retries")

    async def _wait_for_job(self, session: aiohttp.ClientSession, job: Dict[str, Any]) -> Dict[str, Any]:
        job_id = job["id"]
        deadline = time.monotonic() + self.timeout

        while job.get("status") not in FINISHED_STATUSES:
            if time.monotonic() > deadline:
                raise VideoGenerationError(f"Video job {job_id} timed out after {self.timeout}s")
            await asyncio.sleep(self.poll_interval)
            async with session.get(f"{self.base_url}/videos/{job_id}", headers=self.headers) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise VideoGenerationError(f"Status check failed: {response.status} - {error_text}")
                job = await response.json()
            logger.debug(f"Video job {job_id}: {job.get('status')} {job.get('progress', 0)}%")

        if job["status"] != "completed":
            error = job.get("error") or {}
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise VideoGenerationError(f"Video job {job_id} {job['status']}: {message or 'no details'}")

        logger.info(f"Video job {job_id} completed")
        return job

    async def _download_content(self, session: aiohttp.ClientSession, job_id: str) -> bytes:
        async with session.get(f"{self.base_url}/videos/{job_id}/content", headers=self.headers) as response:
            if response.status != 200:
                error_text = await response.text()
                raise VideoGenerationError(f"Download failed: {response.status} - {error_text}")
            content = await response.read()
        if not content:
            raise VideoGenerationError(f"Video job {job_id} returned no content")
        return content

    async def _store(self, job_id: str, content: bytes) -> str:
        filename = f"{job_id}.mp4"
        path = os.path.join(self.output_dir, filename)

        def _write():
            os.makedirs(self.output_dir, exist_ok=True)
            with open(path, "wb") as out:
                out.write(content)

        await asyncio.to_thread(_write)
        logger.info(f"Saved scene video {path} ({len(content)} bytes)")
        return filename

    async def generate_scene_video(self, prompt: str) -> Optional[str]:
        """Generate a scene and return its public URL, or None when generation fails."""
        try:
            async with with_concurrency_limit(VIDEO_SEMAPHORE, "video_generation"):
                filename = await self.create_video(prompt)
            return f"/media/videos/{filename}"
        except Exception as e:
            logger.error(f"Scene video generation failed: {e}")
            return None


# Global service instance
video_service = VideoService()
