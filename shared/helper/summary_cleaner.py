"""Normalisation of raw model output into a short chunk summary."""

import re

MAX_SUMMARY_WORDS = 10
TRAILING_PUNCTUATION = ".!?:;,"

BOILERPLATE_PREFIXES: tuple[str, ...] = (
    "Summary:",
    "Topic:",
    "Key words:",
    "Keywords:",
    "The text is about",
    "This text discusses",
    "The topic is",
    "Main topic:",
    "Subject:",
    "Theme:",
)

_THINK_PATTERN = re.compile(r"<think>.*?</think>", re.DOTALL)
_TAG_PATTERN = re.compile(r"<[^>]*>")


def _strip_prefix(text: str) -> str:
    lowered = text.lower()
    for prefix in BOILERPLATE_PREFIXES:
        if lowered.startswith(prefix.lower()):
            # first match only
            return text[len(prefix):].strip()
    return text


def _clean_once(raw: str) -> str:
    cleaned = _THINK_PATTERN.sub("", raw)
    cleaned = _TAG_PATTERN.sub("", cleaned).strip()
    cleaned = _strip_prefix(cleaned)
    cleaned = cleaned.rstrip(TRAILING_PUNCTUATION).strip()
    return " ".join(cleaned.split()[:MAX_SUMMARY_WORDS])


def clean_summary(raw: str) -> str:
    """Turn a raw generation response into a clean summary of at most 10 words.

    Removes ``<think>...</think>`` reasoning regions and any remaining markup
    tags, strips one known boilerplate lead-in (e.g. "Summary:"), strips
    trailing punctuation and truncates to MAX_SUMMARY_WORDS space-joined words.

    A single pass can expose new trailing punctuation (after truncation) or a
    new lead-in, so the pass is repeated until the text no longer changes.
    This makes the function idempotent: ``clean_summary(clean_summary(x)) ==
    clean_summary(x)`` for every input.

    Args:
        raw (str): The raw model response.

    Returns:
        str: The cleaned summary, possibly empty.
    """
    current = raw
    while True:
        cleaned = _clean_once(current)
        if cleaned == current:
            return cleaned
        current = cleaned
