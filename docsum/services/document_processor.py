import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Protocol, Sequence, Union

from ..errors import AllFilesFailedError, ConfigurationError
from ..models.pipeline import (
    Artifact,
    CombinedResult,
    FileFailure,
    FileOutcome,
    FileSuccess,
    SummaryOptions,
    SummaryResult,
    WordCount,
)
from .extractor_service import TextExtractor

logger = logging.getLogger(__name__)

MAX_COMBINED_KEYWORDS = 10


class SummaryGenerator(Protocol):
    async def generate_summary(self, text: str, options: SummaryOptions) -> SummaryResult: ...


@dataclass
class BatchOutcome:
    result: Union[SummaryResult, CombinedResult]
    outcomes: list[FileOutcome]


def _merge_keywords(successes: Sequence[FileSuccess]) -> list[str]:
    seen: dict[str, None] = {}
    for outcome in successes:
        for keyword in outcome.data.keywords or []:
            seen.setdefault(keyword, None)
    return list(seen)[:MAX_COMBINED_KEYWORDS]


class DocumentProcessor:
    """Turns submitted artifacts into summaries, one at a time or as a combined batch."""

    def __init__(self, extractor: TextExtractor, generator: SummaryGenerator, max_concurrency: int = 4):
        self._extractor = extractor
        self._generator = generator
        self._max_concurrency = max(1, max_concurrency)

    # ── Single file ──────────────────────────────────────────────────────────

    async def process_one(self, artifact: Artifact, options: SummaryOptions) -> SummaryResult:
        started = time.perf_counter()

        text = await self._extractor.extract(artifact)
        result = await self._generator.generate_summary(
            text,
            options.model_copy(update={"include_keywords": True, "include_sentiment": True}),
        )

        return result.model_copy(
            update={
                "original_text": text,
                "file_name": artifact.name,
                "file_type": artifact.media_type,
                "file_size": artifact.size,
                "processing_time": round(time.perf_counter() - started, 2),
            }
        )

    async def process_single(self, artifact: Artifact, options: SummaryOptions) -> SummaryResult:
        return await self.process_one(artifact, options)

    # ── Batch ────────────────────────────────────────────────────────────────

    async def process_many(
        self, artifacts: Sequence[Union[Artifact, FileFailure]], options: SummaryOptions
    ) -> list[FileOutcome]:
        """Summarize every artifact on its own, keeping input order.

        Items that are already a FileFailure (rejected before extraction) pass
        through unchanged at their position. A ConfigurationError cancels the
        remaining files and is raised at once.
        """
        if not artifacts:
            raise ValueError("At least one file is required.")

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def run(artifact: Artifact) -> FileOutcome:
            file_name = artifact.name or "unknown"
            async with semaphore:
                try:
                    data = await self.process_one(artifact, options)
                except ConfigurationError:
                    raise
                except Exception as exc:
                    logger.warning("Processing failed for %s: %s", file_name, exc)
                    return FileFailure(file_name=file_name, error=str(exc))
            return FileSuccess(file_name=file_name, data=data)

        tasks = {
            i: asyncio.create_task(run(item))
            for i, item in enumerate(artifacts)
            if not isinstance(item, FileFailure)
        }
        try:
            await asyncio.gather(*tasks.values())
        except ConfigurationError:
            for task in tasks.values():
                task.cancel()
            await asyncio.gather(*tasks.values(), return_exceptions=True)
            raise

        return [tasks[i].result() if i in tasks else item for i, item in enumerate(artifacts)]

    async def combine(
        self, outcomes: Sequence[FileOutcome], options: SummaryOptions
    ) -> Union[SummaryResult, CombinedResult]:
        successes = [o for o in outcomes if isinstance(o, FileSuccess)]

        if not successes:
            raise AllFilesFailedError([o for o in outcomes if isinstance(o, FileFailure)])

        # A lone success is returned untouched; no meta-summary is generated.
        if len(successes) == 1:
            return successes[0].data

        labeled = "\n\n".join(f"{o.file_name}: {o.data.summary}" for o in successes)
        keywords = _merge_keywords(successes)

        meta = await self._generator.generate_summary(
            labeled,
            SummaryOptions(
                length=options.length or "medium",
                target_language=options.target_language,
                include_keywords=False,
                include_sentiment=True,
            ),
        )

        return CombinedResult(
            **meta.model_dump(exclude={"keywords", "word_count", "original_text"}),
            keywords=keywords,
            original_text="\n\n".join(o.data.original_text or "" for o in successes),
            file_names=[o.file_name for o in successes],
            document_count=len(successes),
            word_count=WordCount(
                original=sum(o.data.word_count.original for o in successes),
                summary=meta.word_count.summary,
            ),
        )

    async def process_batch(
        self, artifacts: Sequence[Union[Artifact, FileFailure]], options: SummaryOptions
    ) -> BatchOutcome:
        outcomes = await self.process_many(artifacts, options)
        result = await self.combine(outcomes, options)

        failed = sum(1 for o in outcomes if isinstance(o, FileFailure))
        logger.info("Batch of %d file(s) summarized, %d failed.", len(outcomes), failed)
        return BatchOutcome(result=result, outcomes=outcomes)
