"""Asset Resolver - finds one usable stock clip per script line, with fallback chains."""

from typing import Any, Callable, Optional

from promo_shorts.core.config import Settings
from promo_shorts.core.exceptions import AssetResolutionError, InsufficientAssets
from promo_shorts.models.schemas import AssetCandidate, Job, QualityTier, ScriptLine, SearchFilters
from promo_shorts.services.stock_search import PexelsSearchClient
from promo_shorts.utils.parallel_executor import ParallelExecutor

# A strategy produces the next query to try, or None to skip itself
QueryStrategy = Callable[[], Optional[str]]

GENERIC_FALLBACK_QUERIES = [
    "{product} unboxing",
    "{mood} product showcase",
    "lifestyle {mood}",
    "modern aesthetic",
    "trending product",
]


class AssetResolver:
    """Resolves visual queries to admissible clips and runs the per-job fallback passes."""

    def __init__(
        self,
        settings: Settings,
        logger: Any,
        search_client: Optional[PexelsSearchClient] = None,
        parallel_executor: Optional[ParallelExecutor] = None,
    ):
        """
        Initialize the asset resolver.

        Args:
            settings: Application settings
            logger: Logger instance
            search_client: Stock-footage search capability
            parallel_executor: Executor used for concurrent per-line resolution
        """
        self.settings = settings
        self.logger = logger
        self.search_client = search_client or PexelsSearchClient(settings, logger)
        self.parallel_executor = parallel_executor or ParallelExecutor(settings, logger)
        self.filters = SearchFilters(
            min_duration=settings.min_clip_duration,
            max_duration=settings.max_clip_duration,
            orientation=settings.pexels_orientation,
        )
        self.min_quality = QualityTier.parse(settings.min_clip_quality) or QualityTier.HD

    # ------------------------------------------------------------------
    # Single query
    # ------------------------------------------------------------------

    def is_admissible(self, candidate: AssetCandidate) -> bool:
        """Duration inside the admissible range and quality at or above the minimum tier."""
        if not self.filters.min_duration <= candidate.duration <= self.filters.max_duration:
            return False
        return candidate.quality is not None and candidate.quality.rank >= self.min_quality.rank

    def select(self, candidates: list[AssetCandidate]) -> Optional[AssetCandidate]:
        """
        Pick the best admissible candidate.

        The highest quality tier wins; among equal tiers the earliest result wins.
        """
        best: Optional[AssetCandidate] = None
        for candidate in candidates:
            if not self.is_admissible(candidate):
                continue
            if best is None or candidate.quality.rank > best.quality.rank:
                best = candidate
        return best

    def _search_phrase(self, query: str) -> str:
        suffix = self.settings.search_query_suffix.strip()
        if suffix and not query.lower().endswith(suffix.lower()):
            return f"{query} {suffix}"
        return query

    def resolve(self, query: str) -> Optional[AssetCandidate]:
        """
        Resolve one visual query.

        Args:
            query: Visual search query

        Returns:
            The selected clip, or None when nothing admissible was found

        Raises:
            AssetResolutionError: If the search capability itself fails (retryable)
        """
        candidates = self.search_client.search(self._search_phrase(query), self.filters)
        return self.select(candidates)

    # ------------------------------------------------------------------
    # Fallback chains
    # ------------------------------------------------------------------

    def resolve_first(self, strategies: list[QueryStrategy], label: str = "") -> Optional[AssetCandidate]:
        """
        Try query strategies in order and stop at the first resolved clip.

        Search failures are absorbed here: a failed query counts as no result.

        Args:
            strategies: Ordered query strategies
            label: Log label (e.g. "line 2")

        Returns:
            First resolved clip, or None when every strategy is exhausted
        """
        for strategy in strategies:
            query = strategy()
            if not query:
                continue
            self.logger.info(f"[PEXELS] 🔍 {label}: searching for '{query}'")
            try:
                candidate = self.resolve(query)
            except AssetResolutionError as e:
                self.logger.warning(f"[PEXELS] ⚠️ Search failed for '{query}': {e}")
                continue
            if candidate is not None:
                return candidate
        return None

    def line_strategies(
        self,
        line: ScriptLine,
        job: Job,
        keyword_fn: Optional[Callable[[ScriptLine, str], Optional[str]]] = None,
    ) -> list[QueryStrategy]:
        """Ordered query strategies of one script line."""
        strategies: list[QueryStrategy] = []
        if keyword_fn is not None:
            strategies.append(lambda: keyword_fn(line, job.product_label))
        strategies.extend(
            [
                lambda: f"{job.product_label} {job.mood}",
                lambda: f"{job.product_label} product",
                lambda: f"{job.mood} lifestyle aesthetic",
            ]
        )
        return strategies

    def resolve_line(
        self,
        line: ScriptLine,
        job: Job,
        keyword_fn: Optional[Callable[[ScriptLine, str], Optional[str]]] = None,
    ) -> Optional[AssetCandidate]:
        """Run the per-line fallback chain."""
        candidate = self.resolve_first(self.line_strategies(line, job, keyword_fn), label=f"line {line.index + 1}")
        if candidate is not None:
            self.logger.info(f"[PEXELS] ✅ Found video for line {line.index + 1}")
        else:
            self.logger.warning(f"[PEXELS] ⚠️ No video found for line {line.index + 1}, will use fallback")
        return candidate

    def fill_with_generic(self, job: Job, assets: list[AssetCandidate]) -> list[AssetCandidate]:
        """
        Second pass with generic queries when too few distinct clips were found.

        Args:
            job: Job being resolved
            assets: Clips resolved per line, in line order

        Returns:
            New list with generic clips appended, duplicates skipped. When the
            pass runs, repeated per-line clips are collapsed first.
        """
        if len({asset.locator for asset in assets}) >= self.settings.min_assets:
            return list(assets)

        distinct: dict[str, AssetCandidate] = {}
        for asset in assets:
            distinct.setdefault(asset.locator, asset)
        assets = list(distinct.values())

        self.logger.info("[PEXELS] 🔄 Adding fallback videos...")
        for template in GENERIC_FALLBACK_QUERIES:
            if len(assets) >= self.settings.max_assets:
                break
            query = template.format(product=job.product_label, mood=job.mood)
            try:
                candidate = self.resolve(query)
            except AssetResolutionError as e:
                self.logger.warning(f"[PEXELS] ⚠️ Search failed for '{query}': {e}")
                continue
            if candidate is not None and all(candidate.locator != a.locator for a in assets):
                assets.append(candidate)
                self.logger.info(f"[PEXELS] ✅ Added fallback video: {query}")
        return assets

    def resolve_all(
        self,
        lines: list[ScriptLine],
        job: Job,
        keyword_fn: Optional[Callable[[ScriptLine, str], Optional[str]]] = None,
    ) -> list[AssetCandidate]:
        """
        Resolve clips for every line concurrently, then top up with generic queries.

        Returns only after every line's chain has finished.

        Args:
            lines: Script lines in order
            job: Job being resolved
            keyword_fn: Optional AI keyword strategy, tried first for each line

        Returns:
            Between 1 and max_assets clips, per-line results first in line order

        Raises:
            InsufficientAssets: If no clip was resolved at all
        """
        self.logger.info("[PEXELS] 🎬 Finding product-specific videos...")
        tasks = [lambda line=line: self.resolve_line(line, job, keyword_fn) for line in lines]
        results = self.parallel_executor.execute_api_calls(
            tasks, task_names=[f"resolve_line_{line.index + 1}" for line in lines]
        )

        assets: list[AssetCandidate] = []
        for candidate, error in results:
            if error is not None:
                raise error
            if candidate is not None:
                assets.append(candidate)

        assets = self.fill_with_generic(job, assets)[: self.settings.max_assets]
        if not assets:
            raise InsufficientAssets(
                "Could not find any suitable videos for the product.",
                debug=f"product='{job.product_label}', mood='{job.mood}'",
            )

        self.logger.info(f"[PEXELS] ✅ Total videos found: {len(assets)}")
        return assets
