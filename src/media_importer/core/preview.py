"""Preview images for the selected file."""

import io
import logging
import subprocess
from pathlib import Path
from typing import Protocol

from PIL import Image

from .filesystem import FileSystem
from .models import ApplicationConfig

logger = logging.getLogger(__name__)


class FrameExtractor(Protocol):
    """Transcoding collaborator that writes one still frame of a video."""

    def extract_frame(self, input_path: str | Path, output_path: str | Path) -> bool:
        """Write a still frame of `input_path` to `output_path`. Returns success."""
        ...


class FfmpegFrameExtractor:
    """Frame extraction with the ffmpeg command line tool."""

    def __init__(
        self, ffmpeg_path: str = "ffmpeg", capture_seconds: float = 0.0, timeout: float = 30.0
    ):
        self.ffmpeg_path = ffmpeg_path
        self.capture_seconds = capture_seconds
        self.timeout = timeout

    def extract_frame(self, input_path: str | Path, output_path: str | Path) -> bool:
        cmd = [
            self.ffmpeg_path,
            "-y",
            "-v",
            "error",
            "-ss",
            f"{self.capture_seconds:.3f}",
            "-i",
            str(input_path),
            "-frames:v",
            "1",
            str(output_path),
        ]

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError:
            logger.warning(f"ffmpeg not found at {self.ffmpeg_path}; cannot extract video frames")
            return False
        except subprocess.TimeoutExpired:
            logger.warning(f"ffmpeg timed out after {self.timeout}s on {input_path}")
            return False

        if result.returncode != 0:
            logger.warning(f"ffmpeg failed on {input_path}: {result.stderr.strip()}")
            return False

        output = Path(output_path)
        return output.exists() and output.stat().st_size > 0


class PreviewGenerator:
    """Produces a displayable still image for an image or video file."""

    def __init__(
        self,
        config: ApplicationConfig | None = None,
        filesystem: FileSystem | None = None,
        frame_extractor: FrameExtractor | None = None,
    ):
        """
        Initialize the preview generator.

        Args:
            config: Application configuration, defaults to ApplicationConfig()
            filesystem: Filesystem collaborator, defaults to FileSystem()
            frame_extractor: Video frame source, defaults to ffmpeg
        """
        self.config = config or ApplicationConfig()
        self.filesystem = filesystem or FileSystem()
        self.frame_extractor = frame_extractor or FfmpegFrameExtractor(
            ffmpeg_path=self.config.ffmpeg_path,
            capture_seconds=self.config.frame_capture_seconds,
            timeout=self.config.frame_timeout_seconds,
        )

    def generate(
        self, path: str | Path, errors: list[tuple[str, str]] | None = None
    ) -> Image.Image | None:
        """
        Generate a preview image.

        Failures never propagate: they are appended to `errors` as
        ("Preview Error", message) rows and None is returned.

        Args:
            path: File to preview
            errors: List collecting preview error rows

        Returns:
            Loaded PIL image, or None if there is no preview
        """
        file_path = Path(path)
        try:
            if self.filesystem.is_offline(file_path):
                return None

            kind = self.config.media_kind(file_path)
            if kind == "image":
                image = self._image_preview(file_path)
            elif kind == "video":
                image = self._video_preview(file_path)
            else:
                return None

            image.thumbnail(self.config.preview_max_size, Image.Resampling.LANCZOS)
            return image

        except Exception as e:
            logger.warning(f"Could not create preview for {file_path.name}: {e}")
            if errors is not None:
                errors.append(("Preview Error", str(e)))
            return None

    def _image_preview(self, file_path: Path) -> Image.Image:
        data = self.filesystem.open_bytes(file_path)
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return img.copy()

    def _video_preview(self, file_path: Path) -> Image.Image:
        temp_file = self.filesystem.make_temp_file(suffix=".jpg")
        try:
            if not self.frame_extractor.extract_frame(file_path, temp_file):
                raise RuntimeError(f"Could not extract a frame from {file_path.name}")
            with Image.open(temp_file) as img:
                img.load()
                return img.copy()
        finally:
            self.filesystem.remove(temp_file)
