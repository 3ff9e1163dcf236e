"""Tests for clone classification and report grouping."""

from __future__ import annotations

from clone_check.index.worker import TokenIndex
from clone_check.models.dto import SubmissionRecord
from clone_check.models.tokens import NO_DENIZEN, Mode
from clone_check.report.extractor import build_report_rows, find_clone_classes, filter_clone_classes
from clone_check.tokenizers import PythonTokenizer


def index_with(*entries: tuple[Mode, int, int, str, str]) -> TokenIndex:
    index = TokenIndex()
    tokenizer = PythonTokenizer()
    for mode, owner_id, denizen_id, filename, source in entries:
        for unit in tokenizer.tokenize(source, filename, mode, owner_id, denizen_id):
            index.add_unit(unit)
    return index


def test_renamed_functions_form_one_clone_class(sources: dict[str, str]) -> None:
    index = index_with(
        (Mode.SUBMISSION, 1, 10, "shop.py", sources["price_a"]),
        (Mode.SUBMISSION, 2, 20, "cart.py", sources["price_b"]),
        (Mode.SUBMISSION, 3, 30, "hello.py", sources["greeting"]),
    )
    classes = find_clone_classes(index)
    assert len(classes) == 1
    clones = classes[0].clones
    assert {(c.submission_id, c.file, c.function_name) for c in clones} == {
        (1, "shop.py", "total_price"),
        (2, "cart.py", "compute"),
    }
    assert all((c.from_line, c.to_line) in {(2, 7), (2, 6)} for c in clones)


def test_self_duplicates_are_not_reported(sources: dict[str, str]) -> None:
    index = index_with(
        (Mode.SUBMISSION, 1, 10, "a.py", sources["price_a"]),
        (Mode.SUBMISSION, 1, 10, "b.py", sources["price_b"]),
    )
    classes = find_clone_classes(index)
    assert len(classes) == 1
    assert filter_clone_classes(classes) == []
    assert build_report_rows(classes, []) == {}


def test_baseline_only_matches_are_not_reported(sources: dict[str, str]) -> None:
    index = index_with(
        (Mode.COURSE, 5, NO_DENIZEN, "base.py", sources["args"]),
        (Mode.SUBMISSION, 1, 10, "main.py", sources["args"]),
    )
    classes = find_clone_classes(index)
    assert len(classes) == 1
    assert build_report_rows(classes, []) == {}


def test_code_shared_with_baseline_is_not_reported(sources: dict[str, str]) -> None:
    index = index_with(
        (Mode.COURSE, 5, NO_DENIZEN, "base.py", sources["args"]),
        (Mode.SUBMISSION, 1, 10, "main.py", sources["args"]),
        (Mode.SUBMISSION, 2, 20, "main.py", sources["args"]),
    )
    classes = find_clone_classes(index)

    assert len(classes) == 1
    assert {clone.submission_id for clone in classes[0].clones} == {1, 2, 5}
    assert filter_clone_classes(classes) == []
    assert build_report_rows(classes, []) == {}


def test_baseline_does_not_hide_other_clones(sources: dict[str, str]) -> None:
    index = index_with(
        (Mode.COURSE, 5, NO_DENIZEN, "base.py", sources["args"]),
        (Mode.SUBMISSION, 1, 10, "main.py", sources["args"] + sources["price_a"]),
        (Mode.SUBMISSION, 2, 20, "main.py", sources["args"] + sources["price_b"]),
    )

    rows = build_report_rows(find_clone_classes(index), [])

    assert set(rows) == {1, 2}
    for body in rows.values():
        assert len(body) == 1
        assert {info.function_name for info in body[0]} == {"total_price", "compute"}


def test_same_student_across_submissions_is_not_a_clone(sources: dict[str, str]) -> None:
    index = index_with(
        (Mode.SUBMISSION, 1, 10, "a.py", sources["price_a"]),
        (Mode.SUBMISSION, 4, 10, "a.py", sources["price_b"]),
    )
    classes = find_clone_classes(index)
    assert len(filter_clone_classes(classes)) == 1
    assert build_report_rows(classes, []) == {}


def test_report_rows_carry_metadata_and_are_sorted(sources: dict[str, str]) -> None:
    index = index_with(
        (Mode.SUBMISSION, 1, 10, "z.py", sources["price_a"]),
        (Mode.SUBMISSION, 1, 10, "a.py", sources["greeting"]),
        (Mode.SUBMISSION, 2, 20, "z.py", sources["price_b"]),
        (Mode.SUBMISSION, 2, 20, "b.py", sources["greeting"]),
    )
    submissions = [SubmissionRecord(id=1, denizen_id=10, denizen="alice", project="shop")]

    rows = build_report_rows(find_clone_classes(index), submissions)

    assert [[info.file for info in clone_class] for clone_class in rows[1]] == [["a.py", "b.py"], ["z.py", "z.py"]]
    first = rows[1][0]
    by_submission = {info.submission_id: info for info in first}
    assert by_submission[1].denizen == "alice"
    assert by_submission[1].project == "shop"
    assert by_submission[2].denizen is None
    assert by_submission[2].project is None
