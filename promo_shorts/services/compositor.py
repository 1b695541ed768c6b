"""Compositor - materializes render graph inputs and runs ffmpeg."""

import shutil
import subprocess
import threading
import time
from pathlib import Path
from typing import Any, Optional

import requests

from promo_shorts.core.config import Settings
from promo_shorts.core.exceptions import DependencyUnavailable, RenderEngineError
from promo_shorts.models.schemas import RenderResult
from promo_shorts.services.ffmpeg_command import build_ffmpeg_command
from promo_shorts.services.render_graph import GraphInput, RenderGraph
from promo_shorts.utils.scoped_resources import ScopedResources

OUTPUT_TAIL_LINES = 40


def resolve_ffmpeg_binary(name: str = "ffmpeg") -> str:
    """
    Locate the ffmpeg executable.

    Raises:
        DependencyUnavailable: If ffmpeg is not installed or not on PATH
    """
    path = shutil.which(name)
    if not path:
        raise DependencyUnavailable(
            "FFmpeg is not installed or not on PATH",
            debug=f"looked for '{name}'",
        )
    return path


class Compositor:
    """Executes a RenderGraph with ffmpeg and publishes the result."""

    def __init__(self, settings: Settings, logger: Any, session: Optional[requests.Session] = None):
        """
        Initialize the compositor.

        Args:
            settings: Application settings
            logger: Logger instance
            session: Optional requests session used for clip downloads
        """
        self.settings = settings
        self.logger = logger
        self.session = session or requests.Session()
        self.videos_dir = Path(settings.output_dir) / "videos"

    def compose(self, graph: RenderGraph, job_id: str, resources: Optional[ScopedResources] = None) -> RenderResult:
        """
        Render the graph to a published mp4.

        Remote clips are downloaded into scoped temporary files first. Every
        temporary file of the job is released before this returns or raises.

        Args:
            graph: Render graph of the job
            job_id: Job correlation id
            resources: Job registry (a private one is used when omitted)

        Returns:
            RenderResult with the public locator

        Raises:
            RenderEngineError: If a download fails, ffmpeg fails or times out
        """
        resources = resources or ScopedResources(Path(self.settings.scratch_dir), job_id, self.logger)
        try:
            ffmpeg = resolve_ffmpeg_binary(self.settings.ffmpeg_binary)
            input_paths = [self._materialize(i, graph_input, resources) for i, graph_input in enumerate(graph.inputs)]
            scratch_output = resources.path_for("render", ".mp4")

            cmd = build_ffmpeg_command(graph, input_paths, scratch_output, self.settings, ffmpeg_binary=ffmpeg)
            self._run(cmd, graph.total_duration)

            if not scratch_output.exists() or scratch_output.stat().st_size == 0:
                raise RenderEngineError("FFmpeg produced no output", debug=str(scratch_output))

            final_path = self._reserve_output(job_id, resources.token)
            try:
                shutil.move(str(scratch_output), final_path)
            except OSError:
                final_path.unlink(missing_ok=True)
                raise
            resources.forget(scratch_output)
            self.logger.info(f"[FFMPEG] ✅ Video published: {final_path}")

            return RenderResult(
                output_locator=f"/videos/{final_path.name}",
                output_path=str(final_path.resolve()),
                duration=graph.total_duration,
                width=graph.width,
                height=graph.height,
                audio_tracks=graph.audio_tracks,
            )
        except DependencyUnavailable as e:
            raise RenderEngineError("FFmpeg is not available", debug=e.debug) from e
        except OSError as e:
            raise RenderEngineError("Could not write render output", debug=str(e)) from e
        finally:
            resources.release_all()

    def _reserve_output(self, job_id: str, token: str) -> Path:
        """Claim the public file name; a job sharing the timestamp gets the token-suffixed name."""
        self.videos_dir.mkdir(parents=True, exist_ok=True)
        for name in (f"final-video-{job_id}.mp4", f"final-video-{job_id}-{token}.mp4"):
            path = self.videos_dir / name
            try:
                path.touch(exist_ok=False)
            except FileExistsError:
                continue
            return path
        raise RenderEngineError("Output file already exists", debug=f"job_id={job_id}, token={token}")

    def _materialize(self, index: int, graph_input: GraphInput, resources: ScopedResources) -> Path:
        if not graph_input.is_remote:
            path = Path(graph_input.locator)
            if not path.exists():
                raise RenderEngineError(f"Input file not found: {path}")
            return path

        path = resources.path_for(f"input-{index}", ".mp4")
        self.logger.info(f"[FFMPEG] ⬇️ Downloading clip {index + 1}...")
        try:
            with self.session.get(
                graph_input.locator, stream=True, timeout=self.settings.download_timeout_seconds
            ) as response:
                response.raise_for_status()
                with open(path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=1024 * 256):
                        if chunk:
                            f.write(chunk)
        except requests.exceptions.RequestException as e:
            raise RenderEngineError(f"Failed to download clip {index + 1}", debug=str(e)) from e
        return path

    def _run(self, cmd: list[str], total_duration: float) -> None:
        cmd_with_progress = cmd[:-1] + ["-progress", "pipe:1", "-nostats", cmd[-1]]
        timeout_seconds = self.settings.render_timeout_seconds

        self.logger.info("[FFMPEG] 🎬 Rendering...")
        self.logger.debug(f"[FFMPEG] Command: {' '.join(cmd_with_progress)}")

        start_time = time.time()
        try:
            process = subprocess.Popen(
                cmd_with_progress,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                bufsize=1,
            )
        except OSError as e:
            raise RenderEngineError("Failed to start FFmpeg", debug=str(e)) from e

        output_tail: list[str] = []
        timed_out = False
        last_percent = -1

        def _kill_on_timeout() -> None:
            nonlocal timed_out
            timed_out = True
            process.kill()

        timer = threading.Timer(timeout_seconds, _kill_on_timeout)
        timer.daemon = True
        timer.start()
        try:
            for line in process.stdout or []:
                line = line.strip()
                if not line:
                    continue
                output_tail.append(line)
                if len(output_tail) > OUTPUT_TAIL_LINES * 5:
                    output_tail = output_tail[-OUTPUT_TAIL_LINES:]

                if line.startswith("out_time_ms=") and total_duration > 0:
                    try:
                        seconds = int(line.split("=", 1)[1]) / 1_000_000
                    except ValueError:
                        continue
                    percent = min(100, int(seconds / total_duration * 100))
                    if percent >= last_percent + 10:
                        last_percent = percent
                        self.logger.info(f"[FFMPEG] Processing: {percent}% done")
            process.wait()
        finally:
            timer.cancel()

        tail_text = "\n".join(output_tail[-OUTPUT_TAIL_LINES:])
        if timed_out:
            raise RenderEngineError(f"FFmpeg timed out after {timeout_seconds:.0f}s", debug=tail_text)
        if process.returncode != 0:
            raise RenderEngineError(f"FFmpeg failed (code {process.returncode})", debug=tail_text)

        self.logger.info(f"[FFMPEG] ✅ Render finished in {time.time() - start_time:.1f}s")
