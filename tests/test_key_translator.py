"""Tests for client path to object key translation.

Covers:
- Identity below the data root for paths outside the job scratch area
- Attempt folding for task output written below _temporary
- MalformedPathError when the scratch marker leaves no object name
- The narrow "offset 0 or offset 1 with leading slash" boundary check
- Alternative marker vocabularies
"""

from __future__ import annotations

import pytest

from flatfs.config import Markers
from flatfs.errors import MalformedPathError
from flatfs.paths import KeyTranslator, is_self_or_descendant, path_name, path_parent

HOST = "swift2d://root.sl/"
ATTEMPT_ID = "20160313_0000_m_000019_0"


@pytest.fixture
def translator() -> KeyTranslator:
    return KeyTranslator(HOST, "root", Markers())


def attempt_path(attempt_id: str, leaf: str = "part-r-00019.csv") -> str:
    return f"{HOST}out/_temporary/0/_temporary/attempt_{attempt_id}/{leaf}"


class TestIdentity:
    """Paths without the scratch marker map one-to-one onto keys."""

    @pytest.mark.parametrize(
        "remainder",
        [
            "out",
            "out/part-1",
            "a/b/c/one3.txt",
            "out/_SUCCESS",
            "data.csv",
        ],
    )
    def test_no_marker_is_identity_without_folding(
        self, translator: KeyTranslator, remainder: str
    ) -> None:
        """translate(p, TEMP, False) is p below the data root."""
        assert translator.translate(HOST + remainder, "_temporary", False) == f"root/{remainder}"

    def test_no_marker_is_identity_with_folding(self, translator: KeyTranslator) -> None:
        """Folding only applies below the scratch marker."""
        assert translator.translate(f"{HOST}out/part-1") == "root/out/part-1"

    def test_path_outside_host_scheme_rejected(self, translator: KeyTranslator) -> None:
        """Paths of another container cannot be translated."""
        with pytest.raises(MalformedPathError):
            translator.translate("swift2d://other.sl/out/part-1")


class TestAttemptFolding:
    """Task output keys carry the attempt id in the leaf name."""

    def test_scenario_part_file(self, translator: KeyTranslator) -> None:
        """The documented part file lands at its committed, attempt-qualified key."""
        key = translator.translate(attempt_path(ATTEMPT_ID), "_temporary", True)

        assert key == f"root/out/part-r-00019.csv-{ATTEMPT_ID}"

    def test_nested_output_root(self, translator: KeyTranslator) -> None:
        """The logical root keeps all segments before the marker."""
        path = (
            f"{HOST}aa/bb/cc/one3.txt/_temporary/0/_temporary/"
            "attempt_201610052038_0001_m_000007_15/part-00007"
        )

        assert translator.translate(path) == (
            "root/aa/bb/cc/one3.txt/part-00007-201610052038_0001_m_000007_15"
        )

    def test_distinct_attempts_distinct_keys(self, translator: KeyTranslator) -> None:
        """Retries and speculative duplicates never share a key."""
        first = translator.translate(attempt_path("20160313_0000_m_000019_0"))
        retry = translator.translate(attempt_path("20160313_0000_m_000019_1"))
        other_task = translator.translate(attempt_path("20160313_0000_m_000020_0"))

        assert len({first, retry, other_task}) == 3

    def test_same_attempt_same_key(self, translator: KeyTranslator) -> None:
        """Translation is deterministic."""
        assert translator.translate(attempt_path(ATTEMPT_ID)) == translator.translate(
            attempt_path(ATTEMPT_ID)
        )

    def test_attempt_leaf_not_suffixed(self, translator: KeyTranslator) -> None:
        """An attempt directory itself is not qualified a second time."""
        path = f"{HOST}out/_temporary/0/_temporary/attempt_{ATTEMPT_ID}"

        assert translator.translate(path) == f"root/out/attempt_{ATTEMPT_ID}"

    def test_without_folding_truncates_at_marker(self, translator: KeyTranslator) -> None:
        """Without folding only the logical output root remains."""
        assert translator.translate(attempt_path(ATTEMPT_ID), fold_attempt_id=False) == "root/out"

    def test_no_attempt_segment_keeps_leaf(self, translator: KeyTranslator) -> None:
        """Committed task directories carry no attempt id to fold."""
        path = f"{HOST}out/_temporary/0/task_20160313_0000_m_000019/part-1"

        assert translator.translate(path) == "root/out/part-1"

    def test_job_scratch_directory(self, translator: KeyTranslator) -> None:
        """The job scratch directory folds to a child of the output root."""
        assert translator.translate(f"{HOST}out/_temporary/0") == "root/out/0"

    def test_scratch_leaf_keeps_marker(self, translator: KeyTranslator) -> None:
        """A path ending in the marker still names the marker after folding."""
        key = translator.translate(f"{HOST}out/_temporary/0/_temporary")

        assert key == "root/out/_temporary"
        assert translator.contains_temporary(key)


class TestMissingObjectName:
    """The marker directly below the root leaves no logical name."""

    @pytest.mark.parametrize("fold", [True, False])
    def test_marker_at_offset_zero(self, translator: KeyTranslator, fold: bool) -> None:
        path = f"{HOST}_temporary/0/_temporary/attempt_{ATTEMPT_ID}/part-0007"

        with pytest.raises(MalformedPathError):
            translator.translate(path, "_temporary", fold)

    def test_marker_at_offset_one_after_slash(self, translator: KeyTranslator) -> None:
        """A single leading separator is treated like offset zero."""
        with pytest.raises(MalformedPathError):
            translator.translate(f"{HOST}/_temporary/0/part-0007")

    def test_boundary_check_is_narrow(self, translator: KeyTranslator) -> None:
        """Only offset 0 and '/' + marker are rejected.

        Two leading separators put the marker at offset 2, which is not
        treated as a missing name; the key keeps the stray separator.
        """
        key = translator.translate(f"{HOST}//_temporary/0/part-0007", fold_attempt_id=False)

        assert key == "root//"

    def test_error_names_path(self, translator: KeyTranslator) -> None:
        path = f"{HOST}_temporary/0"

        with pytest.raises(MalformedPathError) as exc_info:
            translator.translate(path)

        assert exc_info.value.path == path
        assert "Object name is missing" in str(exc_info.value)


class TestTaskAttemptId:
    def test_extracts_id_without_prefix(self, translator: KeyTranslator) -> None:
        assert translator.extract_task_attempt_id(attempt_path(ATTEMPT_ID)) == ATTEMPT_ID

    def test_none_without_attempt_segment(self, translator: KeyTranslator) -> None:
        assert translator.extract_task_attempt_id(f"{HOST}out/_temporary/0") is None

    def test_bare_prefix_is_not_an_id(self, translator: KeyTranslator) -> None:
        assert translator.extract_task_attempt_id(f"{HOST}out/attempt_/x") is None


class TestAlternativeMarkers:
    """The marker vocabulary is configuration, not code."""

    def test_custom_vocabulary(self) -> None:
        markers = Markers(temporary="__scratch", attempt_prefix="try-", success="DONE")
        translator = KeyTranslator("s3x://bucket.svc/", "bucket", markers)

        key = translator.translate("s3x://bucket.svc/out/__scratch/1/try-42/part-3")

        assert key == "bucket/out/part-3-42"

    def test_default_marker_ignored_with_custom_vocabulary(self) -> None:
        translator = KeyTranslator("s3x://bucket.svc/", "bucket", Markers(temporary="__scratch"))

        key = translator.translate("s3x://bucket.svc/_temporary/part-3")

        assert key == "bucket/_temporary/part-3"


class TestKeyPathMapping:
    def test_key_to_path_roundtrip(self, translator: KeyTranslator) -> None:
        path = f"{HOST}out/part-1"

        assert translator.key_to_path(translator.path_to_key(path)) == path

    def test_key_outside_data_root_rejected(self, translator: KeyTranslator) -> None:
        with pytest.raises(MalformedPathError):
            translator.key_to_path("other/out")

    def test_bare_data_root_maps_to_host_scheme(self, translator: KeyTranslator) -> None:
        assert translator.key_to_path("root") == HOST

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            (f"{HOST}out/", f"{HOST}out"),
            (f"{HOST}out//", f"{HOST}out"),
            (f"{HOST}out", f"{HOST}out"),
            (HOST, HOST),
        ],
    )
    def test_normalize_drops_trailing_separator(
        self, translator: KeyTranslator, path: str, expected: str
    ) -> None:
        assert translator.normalize(path) == expected


class TestPathHelpers:
    def test_path_name(self) -> None:
        assert path_name(f"{HOST}out/part-1") == "part-1"
        assert path_name("root/out/") == "out"

    def test_path_parent(self) -> None:
        assert path_parent("root/out/part-1") == "root/out"
        assert path_parent("root") == ""

    @pytest.mark.parametrize(
        ("candidate", "expected"),
        [
            ("a/b", True),
            ("a/b/c", True),
            ("a/b2", False),
            ("a/bc/d", False),
            ("a", False),
        ],
    )
    def test_is_self_or_descendant(self, candidate: str, expected: bool) -> None:
        assert is_self_or_descendant(candidate, "a/b") is expected
