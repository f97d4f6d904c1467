"""
Text and path helpers shared by relationship detection and grouping.
"""

import re
from typing import Dict, List, Set

from .models import File

_WHITESPACE = re.compile(r'\s+')


def _significant_words(text: str) -> Set[str]:
    return {w for w in _WHITESPACE.split(text.lower()) if len(w) > 2}


def calculate_text_relevance(text1: str, text2: str) -> float:
    """Jaccard similarity over the words longer than two characters."""
    words1 = _significant_words(text1)
    words2 = _significant_words(text2)

    union = words1 | words2
    if not union:
        return 0.0
    return len(words1 & words2) / len(union)


def directory_of(path: str) -> str:
    """Everything before the last '/', or '' for root-level files."""
    index = path.rfind('/')
    return path[:index] if index > 0 else ''


def group_files_by_directory(files: List[File]) -> Dict[str, List[File]]:
    """Bucket files by directory, keeping first-seen directory order."""
    groups: Dict[str, List[File]] = {}
    for file in files:
        groups.setdefault(directory_of(file.path), []).append(file)
    return groups


def semantic_text(file: File, content_chars: int = 500) -> str:
    """Composite text compared when looking for semantic neighbours."""
    content = (file.content or '')[:content_chars]
    return f"{file.name} {file.summary or ''} {content}"
