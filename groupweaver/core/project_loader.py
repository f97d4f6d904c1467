"""
Builds in-memory File records from a project directory so the grouping
engine can run against a real checkout.
"""

import os
import re
import ast
import logging
from pathlib import Path, PurePosixPath
from typing import List, Optional, Set

import chardet

from .models import File, FileImport

logger = logging.getLogger(__name__)


class FileFilter:
    def __init__(self, ignore_patterns: List[str], size_limit_mb: float):
        self.ignore_patterns = ignore_patterns
        self.size_limit_bytes = size_limit_mb * 1024 * 1024

    def should_ignore_directory(self, dir_path: Path) -> bool:
        return any(dir_path.match(pattern) for pattern in self.ignore_patterns)

    def should_ignore_file(self, file_path: Path) -> bool:
        if any(file_path.match(pattern) for pattern in self.ignore_patterns):
            return True

        try:
            if file_path.stat().st_size > self.size_limit_bytes:
                return True
        except OSError:
            return True

        return False


class ProjectLoader:
    """
    Walks a project tree and turns each text file into a File with its
    content, imports, exports and last-modified time. File ids are the
    root-relative POSIX paths.
    """

    JS_SUFFIXES = {'.js', '.jsx', '.ts', '.tsx', '.mjs', '.cjs'}
    C_SUFFIXES = {'.c', '.h', '.cpp', '.hpp', '.cc'}

    JS_IMPORT_PATTERNS = [
        r'^\s*import\s+(?:[^\'"]*?\s+from\s+)?[\'"]([^\'"]+)[\'"]',
        r'^\s*export\s+[^\'"]*?\s+from\s+[\'"]([^\'"]+)[\'"]',
        r'require\(\s*[\'"]([^\'"]+)[\'"]\s*\)',
        r'import\(\s*[\'"]([^\'"]+)[\'"]\s*\)',
    ]
    JS_EXPORT_PATTERN = (
        r'^\s*export\s+(?:default\s+)?(?:async\s+)?'
        r'(?:function\*?|class|const|let|var|interface|type|enum)\s+([A-Za-z_$][\w$]*)'
    )
    C_INCLUDE_PATTERN = r'^\s*#include\s+"([^"]+)"'

    BINARY_SNIFF_BYTES = 8000

    def __init__(self, root: Path, ignore_patterns: Optional[List[str]] = None,
                 size_limit_mb: float = 1.0, use_git: bool = True):
        self.root = Path(root)
        self.file_filter = FileFilter(ignore_patterns or [], size_limit_mb)
        self.use_git = use_git
        self._repo = None
        self._python_roots: Set[str] = set()

    def load(self) -> List[File]:
        paths = self._collect_files()
        self._python_roots = self._find_python_roots(paths)
        self._repo = self._open_repo() if self.use_git else None

        files = []
        for path in paths:
            file = self._load_file(path)
            if file is not None:
                files.append(file)

        logger.info(f"Loaded {len(files)} files from {self.root}")
        return files

    def _collect_files(self) -> List[Path]:
        project_files = []

        for root, dirs, names in os.walk(self.root, topdown=True):
            root_path = Path(root)
            # Filter directories in-place to avoid traversing ignored directories
            dirs[:] = sorted(d for d in dirs if not self.file_filter.should_ignore_directory(root_path / d))

            for name in sorted(names):
                file_path = root_path / name
                if not file_path.is_file() or self.file_filter.should_ignore_file(file_path):
                    continue
                project_files.append(file_path)

        return project_files

    def _find_python_roots(self, paths: List[Path]) -> Set[str]:
        """Top-level module names importable from the project root or src/."""
        roots = set()
        for path in paths:
            parts = path.relative_to(self.root).parts
            if parts and parts[0] == 'src' and len(parts) > 1:
                parts = parts[1:]
            if len(parts) == 1 and parts[0].endswith('.py'):
                roots.add(parts[0][:-3])
            elif len(parts) > 1 and path.suffix == '.py':
                roots.add(parts[0])
        return roots

    def _open_repo(self):
        try:
            # Imported on demand; GitPython fails at import time when no git executable is installed
            import git
        except ImportError as e:
            logger.debug(f"GitPython unavailable, using file mtimes: {e}")
            return None

        try:
            return git.Repo(self.root, search_parent_directories=True)
        except git.exc.GitError as e:
            logger.debug(f"No git history for {self.root}: {e}")
            return None

    def _load_file(self, path: Path) -> Optional[File]:
        try:
            raw = path.read_bytes()
            mtime_ms = int(path.stat().st_mtime * 1000)
        except OSError as e:
            logger.debug(f"Skipping unreadable file {path}: {e}")
            return None

        if b'\x00' in raw[:self.BINARY_SNIFF_BYTES]:
            logger.debug(f"Skipping binary file {path}")
            return None

        content = self._decode(raw)
        relative = path.relative_to(self.root).as_posix()
        suffix = path.suffix.lower()

        return File(
            id=relative,
            path=relative,
            name=path.name,
            content=content,
            imports=[FileImport(source=s) for s in self._extract_imports(content, suffix, relative)],
            exports=self._extract_exports(content, suffix),
            updated_at=self._last_modified(path, mtime_ms)
        )

    @staticmethod
    def _decode(raw: bytes) -> str:
        try:
            return raw.decode('utf-8')
        except UnicodeDecodeError:
            encoding = chardet.detect(raw).get('encoding') or 'latin-1'
            return raw.decode(encoding, errors='replace')

    def _extract_imports(self, content: str, suffix: str, relative: str) -> List[str]:
        if suffix == '.py':
            sources = self._python_imports(content)
        elif suffix in self.JS_SUFFIXES:
            sources = [
                m.group(1)
                for pattern in self.JS_IMPORT_PATTERNS
                for m in re.finditer(pattern, content, re.MULTILINE)
                if m.group(1).startswith(('.', '/', '@/'))
            ]
        elif suffix in self.C_SUFFIXES:
            sources = [m.group(1) for m in re.finditer(self.C_INCLUDE_PATTERN, content, re.MULTILINE)]
        else:
            sources = []

        # Preserve order, drop duplicates and self references
        unique = []
        for source in sources:
            if source and source not in unique and not relative.endswith(source):
                unique.append(source)
        return unique

    def _python_imports(self, content: str) -> List[str]:
        try:
            tree = ast.parse(content)
        except SyntaxError:
            return self._python_imports_regex(content)

        sources = []
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    if self._is_local_module(alias.name):
                        sources.append(alias.name.replace('.', '/'))
            elif isinstance(node, ast.ImportFrom):
                if node.level > 0:
                    if node.module:
                        sources.append(node.module.replace('.', '/'))
                    else:
                        sources.extend(alias.name for alias in node.names)
                elif node.module and self._is_local_module(node.module):
                    sources.append(node.module.replace('.', '/'))
        return sources

    def _python_imports_regex(self, content: str) -> List[str]:
        sources = []
        for match in re.finditer(r'^\s*(?:from\s+(\.*)([\w.]*)\s+import|import\s+([\w.]+))', content, re.MULTILINE):
            dots, from_module, plain = match.groups()
            module = from_module or plain
            if not module:
                continue
            if dots or self._is_local_module(module):
                sources.append(module.replace('.', '/'))
        return sources

    def _is_local_module(self, module: str) -> bool:
        return module.split('.', 1)[0] in self._python_roots

    def _extract_exports(self, content: str, suffix: str) -> List[str]:
        if suffix == '.py':
            try:
                tree = ast.parse(content)
            except SyntaxError:
                return []
            return [
                node.name for node in tree.body
                if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef))
                and not node.name.startswith('_')
            ]
        if suffix in self.JS_SUFFIXES:
            return [m.group(1) for m in re.finditer(self.JS_EXPORT_PATTERN, content, re.MULTILINE)]
        return []

    def _last_modified(self, path: Path, mtime_ms: int) -> int:
        """Last commit time touching the file, falling back to mtime (unix ms)."""
        if self._repo is not None:
            from git.exc import GitError

            try:
                repo_relative = PurePosixPath(path.resolve().relative_to(Path(self._repo.working_tree_dir).resolve()))
                commit = next(self._repo.iter_commits(paths=str(repo_relative), max_count=1), None)
                if commit is not None:
                    return int(commit.committed_date * 1000)
            except (GitError, ValueError, TypeError) as e:
                logger.debug(f"Could not read git history for {path}: {e}")
        return mtime_ms
