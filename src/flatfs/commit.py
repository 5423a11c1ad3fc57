"""Commit reconciliation for the attempt -> final output protocol.

The client framework writes every task's output below
``<out>/_temporary/<job>/_temporary/attempt_<id>/`` and commits by renaming.
Object stores cannot rename cheaply, so each operation is mapped onto
direct store actions instead:

- create writes straight to the final key, with the attempt id folded in
- rename of scratch paths succeeds without touching the store
- delete of scratch paths succeeds without touching the store; other
  deletes remove the object and everything below it by prefix
- mkdirs of ``<out>/_temporary/<job>`` writes one directory marker at ``<out>``
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor

from flatfs.config import DATA_ORIGIN_ATTRIBUTE, FlatFsConfig
from flatfs.errors import BackingStoreError, NotFoundError
from flatfs.paths import KeyTranslator, is_self_or_descendant, path_name, path_parent
from flatfs.store.base import StoreClient
from flatfs.store.models import ObjectStatus
from flatfs.store.streams import ObjectOutputStream

logger = logging.getLogger(__name__)


class CommitReconciler:
    """Decides what each mutating filesystem operation does in the store.

    Stateless apart from its collaborators; safe to share between threads.
    """

    def __init__(
        self,
        store: StoreClient,
        translator: KeyTranslator,
        config: FlatFsConfig,
    ) -> None:
        self._store = store
        self._translator = translator
        self._config = config
        self._markers = config.markers

    @property
    def _host_scheme(self) -> str:
        return self._translator.host_scheme

    def create(self, path: str, overwrite: bool = True) -> ObjectOutputStream:
        """Open the final object for a client path.

        The job success sentinel is job-global and keeps its plain name;
        every other file gets the task attempt id folded into its key.
        """
        logger.debug("create: %s, overwrite is: %s", path, overwrite)
        fold = path_name(path) != self._markers.success
        key = self._translator.translate(path, self._markers.temporary, fold)
        return self._store.create_object(key, self._config.default_content_type, None)

    def rename(self, src: str, dst: str) -> bool:
        """Rename src to dst.

        Task output was already written to its final key by create, so
        renames out of the scratch area are satisfied without store access.
        """
        logger.debug("rename from %s to %s", src, dst)
        key = self._translator.translate(src, self._markers.temporary, True)
        logger.debug("Modified object name %s", key)
        if self._translator.contains_temporary(key) or self._translator.contains_temporary(
            src[len(self._host_scheme) :]
        ):
            return True

        if self._store.exists(self._host_scheme, src):
            logger.debug("Source %s exists", src)
        else:
            logger.debug("Source %s does not exist", src)
        return self._store.rename(self._host_scheme, src, dst)

    def delete(self, path: str, recursive: bool = True) -> bool:
        """Delete a path and everything below it.

        Best effort: a failure to delete one matched key is logged and the
        remaining keys are still deleted. Always reports success.
        """
        path = self._translator.normalize(path)
        key = self._translator.translate(path, self._markers.temporary, True)
        logger.debug("delete: %s recursive %s. modified name %s", path, recursive, key)
        if self._translator.contains_temporary(key):
            return True

        leaf = path_name(path)
        if self._translator.is_attempt_name(leaf):
            parent = self._translator.key_to_path(path_parent(key))
            candidates = self._store.list(self._host_scheme, parent, True, True)
            # Folded output names end with -<attemptId>, not with the leaf.
            suffixes = [leaf]
            attempt_id = self._translator.extract_task_attempt_id(leaf)
            if attempt_id is not None:
                suffixes.append(f"-{attempt_id}")
            targets = [
                c
                for c in candidates
                if is_self_or_descendant(c.path, parent) and c.name.endswith(tuple(suffixes))
            ]
        else:
            logical_path = self._translator.key_to_path(key)
            candidates = self._store.list(self._host_scheme, logical_path, True, True)
            targets = [c for c in candidates if is_self_or_descendant(c.path, logical_path)]

        self._delete_all(targets)
        return True

    def _delete_one(self, status: ObjectStatus) -> bool:
        try:
            return self._store.delete(self._host_scheme, status.path)
        except (BackingStoreError, NotFoundError) as e:
            logger.warning("Failed to delete %s, continuing: %s", status.key, e)
            return False

    def _delete_all(self, targets: Iterable[ObjectStatus]) -> None:
        targets = list(targets)
        if not targets:
            return
        workers = min(self._config.delete_concurrency, len(targets))
        if workers <= 1:
            results = [self._delete_one(status) for status in targets]
        else:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = list(pool.map(self._delete_one, targets))
        logger.debug("Deleted %d of %d matched objects", sum(results), len(targets))

    def mkdirs(self, path: str) -> bool:
        """Create a directory.

        Only ``<out>/_temporary/<job>`` has a physical effect: the job is
        starting to write, so a zero-byte marker is written at ``<out>`` to
        make the output root visible before any task finishes.
        """
        logger.debug("mkdirs: %s", path)
        if not path_parent(path).endswith(self._markers.temporary):
            return True

        key = self._translator.translate(path, self._markers.temporary, True)
        marker_key = path_parent(key)
        logger.debug("Going to create identifier %s", marker_key)
        metadata = {DATA_ORIGIN_ATTRIBUTE: self._config.data_origin}
        out = self._store.create_object(
            marker_key, self._markers.directory_content_type, metadata
        )
        out.close()
        return True
