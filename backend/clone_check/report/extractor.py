"""Classify repeated token runs into reportable clone classes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from clone_check.index.suffix_tree import Node
from clone_check.index.worker import TokenIndex
from clone_check.models.dto import CloneInfo, SubmissionRecord
from clone_check.models.tokens import Mode

logger = logging.getLogger(__name__)

OwnerKey = tuple[int, int]


@dataclass(frozen=True, slots=True)
class Clone:
    """One occurrence of a repeated fragment."""

    submission_id: int
    denizen_id: int
    mode: Mode
    file: str
    from_line: int
    to_line: int
    function_name: str

    @property
    def owner(self) -> OwnerKey:
        return (self.submission_id, self.denizen_id)


@dataclass(slots=True)
class CloneClass:
    clones: list[Clone] = field(default_factory=list)

    @property
    def submission_ids(self) -> set[int]:
        return {clone.submission_id for clone in self.clones if clone.mode is Mode.SUBMISSION}

    def sort_key(self) -> tuple[str, int]:
        if not self.clones:
            return ("", 0)
        first = self.clones[0]
        return (first.file, first.from_line)


def is_clone_candidate(node: Node) -> bool:
    """Maximal, unit-aligned repeat: every branch ends its unit, one starts it."""
    children = node.children.values()
    if not children:
        return False
    return all(child.is_unextendable for child in children) and any(
        child.suffix_start == 0 for child in children
    )


def materialize(node: Node, index: TokenIndex) -> CloneClass:
    clones: list[Clone] = []
    for leaf in node.children.values():
        if leaf.suffix_start != 0:
            continue
        unit = index.unit(leaf.sequence_id)
        first = unit.tokens[0]
        clones.append(
            Clone(
                submission_id=first.owner_id,
                denizen_id=first.denizen_id,
                mode=first.mode,
                file=unit.file,
                from_line=min(token.span.from_line for token in unit.tokens),
                to_line=max(token.span.to_line for token in unit.tokens),
                function_name=unit.function_name,
            )
        )
    clones.sort(key=lambda clone: (clone.submission_id, clone.file, clone.from_line))
    return CloneClass(clones=clones)


def find_clone_classes(index: TokenIndex) -> list[CloneClass]:
    """Walk the suffix tree; must run on the index worker."""
    return [
        materialize(node, index)
        for node in index.tree.find_repeated_substrings()
        if is_clone_candidate(node)
    ]


def involves_baseline(clone_class: CloneClass) -> bool:
    return any(clone.mode is Mode.COURSE for clone in clone_class.clones)


def filter_clone_classes(classes: Iterable[CloneClass]) -> list[CloneClass]:
    """Drop empty classes, classes shared with the course baseline and single-submission classes.

    Code handed out with the course never counts as a clone, however many
    students kept it.
    """
    kept: list[CloneClass] = []
    for clone_class in classes:
        if not clone_class.clones or involves_baseline(clone_class):
            continue
        if len(clone_class.submission_ids) < 2:
            continue
        kept.append(clone_class)
    return kept


def group_by_submission(classes: Iterable[CloneClass]) -> dict[OwnerKey, list[list[Clone]]]:
    """Per submission, the clone lists it takes part in against other students."""
    related: dict[OwnerKey, dict[int, CloneClass]] = {}
    for clone_class in classes:
        for clone in clone_class.clones:
            if clone.mode is not Mode.SUBMISSION:
                continue
            related.setdefault(clone.owner, {})[id(clone_class)] = clone_class

    grouped: dict[OwnerKey, list[list[Clone]]] = {}
    for owner, owner_classes in related.items():
        _, denizen_id = owner
        lists = []
        for clone_class in owner_classes.values():
            comparable = [
                clone
                for clone in clone_class.clones
                if clone.mode is Mode.SUBMISSION and (clone.owner == owner or clone.denizen_id != denizen_id)
            ]
            if len(comparable) > 1:
                lists.append(comparable)
        if lists:
            lists.sort(key=lambda clones: (clones[0].file, clones[0].from_line))
            grouped[owner] = lists
    return grouped


def to_clone_info(clone: Clone, submissions: Mapping[int, SubmissionRecord]) -> CloneInfo:
    record = submissions.get(clone.submission_id)
    return CloneInfo(
        submission_id=clone.submission_id,
        denizen=record.denizen if record is not None else None,
        project=record.project if record is not None else None,
        file=clone.file,
        from_line=clone.from_line,
        to_line=clone.to_line,
        function_name=clone.function_name,
    )


def build_report_rows(
    classes: Iterable[CloneClass],
    submissions: Iterable[SubmissionRecord],
) -> dict[int, list[list[CloneInfo]]]:
    """Filter, group and render clone classes into one body per submission."""
    by_id = {record.id: record for record in submissions}
    reportable = filter_clone_classes(classes)
    for number, clone_class in enumerate(reportable):
        names = ", ".join(sorted({clone.function_name for clone in clone_class.clones}))
        logger.debug(
            "(%s) Clone class %d: %s",
            names,
            number,
            "; ".join(f"{c.submission_id}/{c.function_name}/{c.file}:{c.from_line}:{c.to_line}" for c in clone_class.clones),
        )
    rows: dict[int, list[list[CloneInfo]]] = {}
    for (submission_id, _), lists in group_by_submission(reportable).items():
        rows[submission_id] = [[to_clone_info(clone, by_id) for clone in clones] for clones in lists]
    return rows


__all__ = [
    "Clone",
    "CloneClass",
    "is_clone_candidate",
    "involves_baseline",
    "materialize",
    "find_clone_classes",
    "filter_clone_classes",
    "group_by_submission",
    "build_report_rows",
]
