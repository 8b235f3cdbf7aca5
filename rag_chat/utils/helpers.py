"""
Helper utility functions.

This module contains common text utilities used throughout the application:
- Markdown fence / surrounding prose stripping for model output
- JSON envelope repair
- Vendor name redaction
"""

import re
from typing import Iterable, Optional


_FENCE_PATTERN = re.compile(r"```(?:[a-zA-Z0-9_-]+)?\s*\n?(.*?)```", re.DOTALL)
_TRAILING_COMMA_PATTERN = re.compile(r",(\s*[}\]])")
# Digits right after a family name ("GPT4", "Qwen2.5", "gpt-3.5-turbo") are
# part of the model id, so they go with it.
_VERSION_TAIL = r"(?:[-\s]?\d+(?:\.\d+)*[a-z]*(?:-[a-z0-9]+(?:\.\d+)*)*)?"


def strip_code_fences(text: str) -> str:
    """
    Return the content of the first markdown code fence, or the text itself.

    Example:
        >>> strip_code_fences('Here you go:\\n```json\\n{"a": 1}\\n```')
        '{"a": 1}'
    """
    if not text:
        return ""
    match = _FENCE_PATTERN.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def extract_json_object(text: str) -> Optional[str]:
    """
    Extract the outermost JSON object from text surrounded by prose.

    Scans for the first '{' and returns the substring up to its matching
    '}', honouring string literals and escapes. Returns None if no balanced
    object is found.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def remove_trailing_commas(text: str) -> str:
    """Drop commas directly before a closing brace or bracket."""
    return _TRAILING_COMMA_PATTERN.sub(r"\1", text)


def redact_terms(text: str, terms: Iterable[str], replacement: str) -> str:
    """
    Replace whole-word, case-insensitive occurrences of terms.

    A version tail following a term is replaced along with it, so
    "qwen-2.5-72b-instruct" never leaves "<name>-2.5-72b-instruct" behind.
    Longer terms are replaced first.
    """
    if not text:
        return text
    for term in sorted(set(terms), key=len, reverse=True):
        pattern = re.compile(rf"(?<![\w-]){re.escape(term)}{_VERSION_TAIL}(?![\w])", re.IGNORECASE)
        text = pattern.sub(replacement, text)
    return text


def truncate(text: str, limit: int = 100) -> str:
    """Shorten text for log lines."""
    text = text or ""
    return text if len(text) <= limit else text[:limit] + "..."
