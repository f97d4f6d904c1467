import pytest
import tempfile
import shutil
from pathlib import Path

from groupweaver.core.models import File, FileImport


def make_file(file_id, path=None, content=None, summary=None, imports=None, exports=None, updated_at=None):
    """Build an in-memory File; `path` defaults to the id and `name` to its last segment."""
    path = path or file_id
    return File(
        id=file_id,
        path=path,
        name=path.rsplit('/', 1)[-1],
        content=content,
        summary=summary,
        imports=[FileImport(source=s) for s in imports] if imports is not None else None,
        exports=exports,
        updated_at=updated_at
    )


@pytest.fixture
def file_factory():
    """Expose make_file to tests that prefer fixtures over imports."""
    return make_file


@pytest.fixture
def sample_files():
    """A small mixed project: an import chain, a shared directory and two similar docs."""
    return [
        make_file('src/app.ts', imports=['./lib/util'], exports=['App']),
        make_file('src/lib/util.ts', exports=['util']),
        make_file('src/lib/format.ts'),
        make_file('docs/guide/intro.md', content='grouping files for language model context windows'),
        make_file('docs/notes/usage.md', content='grouping files for language model context budgets'),
        make_file('package.json', content='{"name": "sample"}'),
    ]


@pytest.fixture
def temp_project_dir():
    """Create a temporary project directory with sample files."""
    temp_dir = tempfile.mkdtemp()
    project_path = Path(temp_dir) / "test_project"
    project_path.mkdir()

    main_py_content = '''
import os
import sys
from utils import helper_function
from models import User

def main():
    """Main entry point for the application."""
    user = User("test@example.com")
    return helper_function(user.email)

if __name__ == "__main__":
    main()
'''
    (project_path / "main.py").write_text(main_py_content)

    utils_py_content = '''
import re
from typing import Optional

def helper_function(email: str) -> str:
    """Process email and return formatted result."""
    if not is_valid_email(email):
        raise ValueError("Invalid email format")
    return f"Processed: {email.lower()}"

def is_valid_email(email: str) -> bool:
    return bool(re.match(r'^[^@]+@[^@]+$', email))

def calculate_metrics(data: list) -> dict:
    return {"count": len(data)}

def _private_helper():
    pass
'''
    (project_path / "utils.py").write_text(utils_py_content)

    models_py_content = '''
from dataclasses import dataclass

@dataclass
class User:
    """User model with email."""
    email: str

@dataclass
class Project:
    name: str
    owner: User
'''
    (project_path / "models.py").write_text(models_py_content)

    (project_path / "config.json").write_text('{\n    "app_name": "Test Application",\n    "debug": false\n}')
    (project_path / "README.md").write_text("# Test Project\n\nRun `python main.py` to start the application.\n")
    (project_path / "requirements.txt").write_text("pytest>=7.0.0\n")

    (project_path / "tests").mkdir()
    test_main_content = '''
import unittest
from main import main
from models import User

class TestMain(unittest.TestCase):
    def test_main_function(self):
        self.assertIsNotNone(main())
'''
    (project_path / "tests" / "test_main.py").write_text(test_main_content)

    (project_path / "web" / "lib").mkdir(parents=True)
    (project_path / "web" / "app.js").write_text(
        "import { util } from './lib/util'\n"
        "const React = require('react')\n"
        "export default function App() { return util() }\n"
    )
    (project_path / "web" / "lib" / "util.js").write_text(
        "export function util() { return 1 }\n"
        "export const VALUE = 1\n"
    )

    # Content that must never be loaded
    (project_path / "node_modules" / "pkg").mkdir(parents=True)
    (project_path / "node_modules" / "pkg" / "index.js").write_text("module.exports = {}\n")
    (project_path / "data.bin").write_bytes(b"\x00\x01\x02binary")

    yield project_path

    # Cleanup
    shutil.rmtree(temp_dir)
