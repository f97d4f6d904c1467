import re
import time
from pathlib import PurePosixPath
from typing import List, Optional
from dataclasses import dataclass, field
from enum import Enum

from .models import File


class FileType(Enum):
    """Categorizes files by their role in the project."""
    ENTRY_POINT = "entry_point"        # main.py, index.js, App.js, etc.
    CORE_LIBRARY = "core_library"      # Shared utilities
    BUSINESS_LOGIC = "business_logic"   # Domain-specific code
    CONFIGURATION = "configuration"    # Config files, settings
    TEST = "test"                      # Test files
    DOCUMENTATION = "documentation"     # Docs, README files
    BUILD_SCRIPT = "build_script"      # Build, deployment scripts
    GENERATED = "generated"            # Auto-generated code
    ASSETS = "assets"                  # Images, stylesheets, etc.
    DEPRECATED = "deprecated"          # Old/unused files
    UNKNOWN = "unknown"                # Unclassified files


@dataclass
class FileImportance:
    """Importance score of a file plus the reasons that produced it."""
    score: float
    reasons: List[str] = field(default_factory=list)


class FileImportanceScorer:
    """
    Scores how central a file is likely to be for a reader of the project.

    Every file starts at 1 point and earns one extra point for each signal:
    having imports, having exports, being a configuration file and living
    near the project root. Files touched in the last week earn two points.
    """

    BASE_SCORE = 1.0
    RECENT_DAYS = 7
    DAY_MS = 24 * 60 * 60 * 1000

    CONFIG_EXTENSIONS = {'json', 'yaml', 'yml', 'toml', 'env'}
    CONFIG_SUFFIXES = ('config.js', 'config.ts')

    # Patterns to identify different file types
    FILE_TYPE_PATTERNS = {
        FileType.ENTRY_POINT: [
            r'^main\.(py|js|ts|java|cpp|c|go|rs)$',
            r'^index\.(js|ts|jsx|tsx)$',
            r'^app\.(py|js|ts|jsx|tsx)$',
            r'^run\.(py|js|sh)$',
            r'^server\.(py|js|ts)$',
            r'^__main__\.py$',
            r'^manage\.py$',
            r'^.*App\.(js|ts|jsx|tsx)$',
        ],
        FileType.CORE_LIBRARY: [
            r'^utils?\.(py|js|ts)$',
            r'^helpers?\.(py|js|ts)$',
            r'^lib(rary)?\.(py|js|ts)$',
            r'^core\.(py|js|ts)$',
            r'^base\.(py|js|ts)$',
            r'^common\.(py|js|ts)$',
            r'^constants?\.(py|js|ts)$',
        ],
        FileType.CONFIGURATION: [
            r'^config(uration)?\.(py|js|ts|json|yaml|yml|toml|ini)$',
            r'^settings?\.(py|js|ts|json|yaml|yml)$',
            r'^.*\.env$',
            r'^\.env.*$',
            r'^docker.*$',
            r'^.*\.(json|yaml|yml|toml|ini|cfg)$',
            r'^requirements\.txt$',
            r'^setup\.py$',
            r'^pom\.xml$',
            r'^build\.gradle$',
        ],
        FileType.TEST: [
            r'^test.*\.(py|js|ts)$',
            r'^.*_test\.(py|js|ts|go)$',
            r'^.*Test\.(java|js|ts)$',
            r'^.*\.test\.(js|ts|jsx|tsx)$',
            r'^.*\.spec\.(js|ts|jsx|tsx)$',
            r'^conftest\.py$',
        ],
        FileType.DOCUMENTATION: [
            r'^readme\.(md|txt|rst)$',
            r'^.*\.(md|rst|txt)$',
            r'^docs?/.*$',
            r'^documentation/.*$',
        ],
        FileType.BUILD_SCRIPT: [
            r'^.*\.(sh|bash|bat|cmd|ps1)$',
            r'^makefile$',
            r'^cmake.*$',
            r'^build\.(py|js|ts)$',
            r'^deploy\.(py|js|ts|sh)$',
            r'^.*\.mk$',
        ],
        FileType.GENERATED: [
            r'^.*_pb2\.py$',
            r'^.*\.generated\.(py|js|ts)$',
            r'^.*\.min\.(js|css)$',
            r'^.*\.bundle\.(js|css)$',
            r'^dist/.*$',
            r'^build/.*$',
            r'^generated/.*$',
        ],
        FileType.ASSETS: [
            r'^.*\.(png|jpg|jpeg|gif|svg|ico)$',
            r'^.*\.(css|scss|sass|less)$',
            r'^.*\.(woff|woff2|ttf|eot)$',
            r'^assets?/.*$',
            r'^static/.*$',
            r'^public/.*$',
        ],
        FileType.DEPRECATED: [
            r'^.*\.(old|bak|deprecated|legacy)$',
            r'^old_.*$',
            r'^legacy_.*$',
            r'^deprecated_.*$',
        ]
    }

    BUSINESS_LOGIC_DIRS = {
        'models', 'controllers', 'services', 'handlers', 'views',
        'business', 'logic', 'domain', 'entities', 'repositories',
        'api', 'endpoints', 'routes', 'middleware'
    }

    BUSINESS_LOGIC_PATTERNS = [
        r'class\s+\w+(Service|Controller|Handler|Repository|Manager)',
        r'def\s+\w*(process|handle|manage|execute|validate|calculate)',
        r'function\s+\w*(process|handle|manage|execute|validate|calculate)',
    ]

    def __init__(self, now_ms: Optional[int] = None):
        # Frozen clock for reproducible recency scoring; None reads the wall clock
        self.now_ms = now_ms

    def score(self, file: File) -> FileImportance:
        score = self.BASE_SCORE
        reasons = []

        updated_at = file.updated_at
        if updated_at is not None:
            now = self.now_ms if self.now_ms is not None else int(time.time() * 1000)
            if (now - updated_at) / self.DAY_MS < self.RECENT_DAYS:
                score += 2
                reasons.append('recently updated')

        if file.imports:
            score += 1
            reasons.append('has imports')
        if file.exports:
            score += 1
            reasons.append('has exports')

        if self._is_config_file(file.path):
            score += 1
            reasons.append('configuration file')

        if file.path.count('/') <= 2:
            score += 1
            reasons.append('root level file')

        return FileImportance(score=score, reasons=reasons)

    def _is_config_file(self, path: str) -> bool:
        lowered = path.lower()
        if lowered.endswith(self.CONFIG_SUFFIXES):
            return True
        base = lowered.rsplit('/', 1)[-1]
        if '.' not in base:
            return False
        return base.rsplit('.', 1)[-1] in self.CONFIG_EXTENSIONS

    def classify_file_type(self, file: File) -> FileType:
        """Classify a file based on its name, path and leading content."""
        relative_path = file.path.replace("\\", "/").lstrip('/').lower()
        file_name = PurePosixPath(relative_path).name

        for file_type, patterns in self.FILE_TYPE_PATTERNS.items():
            for pattern in patterns:
                if re.match(pattern, file_name, re.IGNORECASE) or \
                   re.search(pattern, relative_path, re.IGNORECASE):
                    return file_type

        if self._is_business_logic_file(relative_path, file.content):
            return FileType.BUSINESS_LOGIC

        return FileType.UNKNOWN

    def _is_business_logic_file(self, relative_path: str, content: Optional[str]) -> bool:
        path_parts = set(PurePosixPath(relative_path).parts[:-1])
        if path_parts & self.BUSINESS_LOGIC_DIRS:
            return True

        if content:
            head = content[:1000]
            return any(re.search(p, head, re.IGNORECASE) for p in self.BUSINESS_LOGIC_PATTERNS)

        return False


_default_scorer = FileImportanceScorer()


def get_file_importance(file: File) -> FileImportance:
    return _default_scorer.score(file)


def get_file_category(file: File) -> str:
    return _default_scorer.classify_file_type(file).value
