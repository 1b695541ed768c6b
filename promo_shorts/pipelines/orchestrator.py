"""Pipeline orchestrator - script → assets + voice → timing → render graph → compose."""

import time
from concurrent.futures import Future, wait
from pathlib import Path
from typing import Any, Optional

from promo_shorts.core.config import Settings
from promo_shorts.core.logging_config import get_logger
from promo_shorts.models.schemas import Job, JobResult, JobState, ScriptLine
from promo_shorts.services.asset_resolver import AssetResolver
from promo_shorts.services.compositor import Compositor
from promo_shorts.services.music_library import MusicLibrary
from promo_shorts.services.render_graph import RenderGraphBuilder
from promo_shorts.services.script_generator import ScriptGenerator
from promo_shorts.services.timing_planner import TimingPlanner
from promo_shorts.services.voice_synthesizer import VoiceSynthesizer
from promo_shorts.utils.error_handler import classify_error, format_error_message
from promo_shorts.utils.parallel_executor import ParallelExecutor
from promo_shorts.utils.scoped_resources import ScopedResources

# Forward transitions; FAILED is reachable from every non-terminal state
_NEXT_STATE = {
    JobState.RECEIVED: JobState.SCRIPT_VALIDATED,
    JobState.SCRIPT_VALIDATED: JobState.ASSETS_RESOLVING,
    JobState.ASSETS_RESOLVING: JobState.ASSETS_RESOLVED,
    JobState.ASSETS_RESOLVED: JobState.AUDIO_PREPARING,
    JobState.AUDIO_PREPARING: JobState.AUDIO_READY,
    JobState.AUDIO_READY: JobState.COMPOSING,
    JobState.COMPOSING: JobState.COMPLETED,
}


class JobTracker:
    """State machine of one job."""

    def __init__(self, job: Job, logger: Any):
        self.job = job
        self.logger = logger
        self.state = JobState.RECEIVED
        self.history: list[JobState] = [JobState.RECEIVED]
        self.failure_reason: Optional[str] = None

    def advance(self, target: JobState) -> None:
        if self.state.is_terminal:
            raise RuntimeError(f"Job {self.job.job_id} already {self.state.value}")
        if _NEXT_STATE.get(self.state) != target:
            raise RuntimeError(f"Illegal transition {self.state.value} -> {target.value}")
        self.logger.debug(f"State: {self.state.value} -> {target.value}")
        self.state = target
        self.history.append(target)

    def fail(self, reason: str) -> None:
        if self.state.is_terminal:
            return
        self.logger.debug(f"State: {self.state.value} -> failed ({reason})")
        self.state = JobState.FAILED
        self.failure_reason = reason
        self.history.append(JobState.FAILED)


class PipelineOrchestrator:
    """Runs one job end to end and owns its temporary resources."""

    def __init__(
        self,
        settings: Settings,
        logger: Optional[Any] = None,
        script_generator: Optional[ScriptGenerator] = None,
        asset_resolver: Optional[AssetResolver] = None,
        voice_synthesizer: Optional[VoiceSynthesizer] = None,
        music_library: Optional[MusicLibrary] = None,
        timing_planner: Optional[TimingPlanner] = None,
        graph_builder: Optional[RenderGraphBuilder] = None,
        compositor: Optional[Compositor] = None,
        parallel_executor: Optional[ParallelExecutor] = None,
    ):
        """
        Initialize the orchestrator.

        Every collaborator can be injected; missing ones are built from settings.

        Args:
            settings: Application settings
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger or get_logger(__name__)
        self.parallel_executor = parallel_executor or ParallelExecutor(settings, self.logger)
        self.script_generator = script_generator or ScriptGenerator(settings, self.logger)
        self.asset_resolver = asset_resolver or AssetResolver(
            settings, self.logger, parallel_executor=self.parallel_executor
        )
        self.voice_synthesizer = voice_synthesizer or VoiceSynthesizer(settings, self.logger)
        self.music_library = music_library or MusicLibrary(settings, self.logger)
        self.timing_planner = timing_planner or TimingPlanner(settings, self.logger)
        self.graph_builder = graph_builder or RenderGraphBuilder(settings, self.logger)
        self.compositor = compositor or Compositor(settings, self.logger)

    def run(self, job: Job) -> JobResult:
        """
        Run the job.

        Args:
            job: Job to run

        Returns:
            JobResult with the published render

        Raises:
            PipelineError: Classified failure; no partial result is ever returned
        """
        log = self.logger.bind(job_id=job.job_id)
        tracker = JobTracker(job, log)
        resources = ScopedResources(Path(self.settings.scratch_dir), job.job_id, log)
        voice_future: Optional[Future] = None
        start_time = time.time()

        log.info(
            f"🎬 Job started: product='{job.product_label}', mood={job.mood}, language={job.language}, "
            f"audio={job.audio_mode.value}, captions={job.captions_enabled}"
        )
        try:
            # Script first: nothing else starts when it fails
            script = self.script_generator.generate_script(job.product_label, job.mood, job.language)
            tracker.advance(JobState.SCRIPT_VALIDATED)

            voice_id = self.voice_synthesizer.voice_for(job.product_label)

            tracker.advance(JobState.ASSETS_RESOLVING)
            if job.audio_mode.includes_voice:
                voice_future = self.parallel_executor.run_in_background(
                    lambda: self.voice_synthesizer.synthesize(
                        script.narration_text, voice_id, job.language, resources
                    ),
                    task_name="voice_synthesis",
                )

            assets = self.asset_resolver.resolve_all(script.lines, job, keyword_fn=self._visual_keywords)
            tracker.advance(JobState.ASSETS_RESOLVED)
            if len(assets) < self.settings.min_assets:
                log.warning(f"[PEXELS] ⚠️ Only {len(assets)} clip(s) resolved, rendering a shorter video")

            tracker.advance(JobState.AUDIO_PREPARING)
            voice_audio = voice_future.result() if voice_future is not None else None
            music_audio = self.music_library.pick() if job.audio_mode.includes_music else None
            tracker.advance(JobState.AUDIO_READY)

            timing_plan = self.timing_planner.plan(len(assets))
            graph = self.graph_builder.build(
                assets,
                script.texts,
                timing_plan,
                voice_audio=voice_audio,
                music_audio=music_audio,
                captions_enabled=job.captions_enabled,
            )

            tracker.advance(JobState.COMPOSING)
            render = self.compositor.compose(graph, job.job_id, resources=resources)
            tracker.advance(JobState.COMPLETED)

            log.info(f"✅ Job completed in {time.time() - start_time:.1f}s: {render.output_locator}")
            return JobResult(job=job, script=script, voice_id=voice_id, render=render)

        except Exception as e:
            category, _ = classify_error(e)
            tracker.fail(category)
            log.error(
                format_error_message(
                    "Video generation",
                    e,
                    context={"state": tracker.history[-2].value, "category": category},
                )
            )
            raise
        finally:
            if voice_future is not None:
                wait([voice_future])
            released = resources.release_all()
            if released:
                log.debug(f"Cleaned up {released} temporary file(s)")

    def _visual_keywords(self, line: ScriptLine, product_label: str) -> Optional[str]:
        return self.script_generator.generate_visual_keywords(line, product_label)
