"""
Naming helpers shared by window labels and result tables.
"""

import re

_SCHEME = re.compile(r"^(?:file|http|ftp)s?:/*")
_FIRST_PERIOD = re.compile(r"^([\w\-]+)\..+$")


def simplify_dataset_name(dataset: str) -> str:
    """
    Reduce a dataset identifier to a short column label.

    URL scheme prefixes and directories are stripped and everything after the
    first period is dropped, so ``/data/chip.rep1.bw`` becomes ``chip``.
    Combined datasets joined with ``&`` are simplified part by part.
    """
    dataset = _SCHEME.sub("", dataset)
    if "&" in dataset:
        return "&".join(simplify_dataset_name(part) for part in dataset.split("&"))
    if "/" in dataset:
        dataset = dataset.rstrip("/").rsplit("/", 1)[-1]
    return _FIRST_PERIOD.sub(r"\1", dataset)
