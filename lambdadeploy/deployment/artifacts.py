from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Sequence

from ..infra.contracts import ObjectStore
from ..infra.errors import ArtifactFetchError
from ..infra.models import ArtifactPayload, InputArtifactRef


logger = logging.getLogger(__name__)


class ArtifactResolver:
    """Fetch a job's input artifacts into a name-keyed mapping.

    Either every artifact is fetched or ArtifactFetchError is raised; callers
    never see a partial mapping. Fetches run on a small thread pool because they
    are independent reads. Nothing is cached between jobs.
    """

    def __init__(self, store: ObjectStore, *, max_workers: int = 4):
        self.store = store
        self.max_workers = max(1, int(max_workers))

    def resolve(self, refs: Sequence[InputArtifactRef]) -> Dict[str, ArtifactPayload]:
        refs = list(refs)
        if not refs:
            return {}

        seen: set[str] = set()
        for ref in refs:
            if ref.name in seen:
                raise ArtifactFetchError(f"duplicate input artifact name: {ref.name!r}")
            seen.add(ref.name)

        workers = min(self.max_workers, len(refs))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="artifact-fetch") as pool:
            futures = [pool.submit(self._fetch, ref) for ref in refs]
            results: List[object] = []
            for fut in futures:
                try:
                    results.append(fut.result())
                except Exception as e:
                    results.append(e)

        out: Dict[str, ArtifactPayload] = {}
        for ref, res in zip(refs, results):
            if isinstance(res, ArtifactFetchError):
                raise res
            if isinstance(res, Exception):
                raise ArtifactFetchError(f"artifact {ref.name!r} fetch failed: {ref.location.uri} ({res})") from res
            out[ref.name] = res  # type: ignore[assignment]
        return out

    def _fetch(self, ref: InputArtifactRef) -> ArtifactPayload:
        logger.info("[artifacts] fetching name=%s uri=%s", ref.name, ref.location.uri)
        payload = self.store.get_object(ref.name, ref.location)
        logger.info("[artifacts] fetched name=%s bytes=%d content_type=%s", ref.name, payload.size_bytes, payload.content_type)
        return payload
