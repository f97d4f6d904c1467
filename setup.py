"""
Setup script for GroupWeaver - Relationship-aware file grouping for LLM context windows
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README file
readme_path = Path(__file__).parent / "README.md"
if readme_path.exists():
    with open(readme_path, "r", encoding="utf-8") as f:
        long_description = f.read()
else:
    long_description = "GroupWeaver - Relationship-aware file grouping for LLM context windows"

# Read version from package
version = "1.0.0"
try:
    with open(Path(__file__).parent / "groupweaver" / "__version__.py", "r") as f:
        exec(f.read())
        version = __version__
except FileNotFoundError:
    pass

# Core requirements (always installed)
core_requirements = [
    "click>=8.0.0",
    "PyYAML>=6.0",
    "python-dotenv>=1.0.0",
    "chardet>=4.0.0",
    "GitPython>=3.1.0",
]

# Optional feature requirements
extras_require = {
    # Development tools
    "dev": [
        "pytest>=7.0.0",
        "pytest-cov>=4.0.0",
        "black>=22.0.0",
        "flake8>=5.0.0",
        "mypy>=1.0.0",
        "isort>=5.10.0",
    ],
}

extras_require["test"] = ["pytest>=7.0.0", "pytest-cov>=4.0.0"]
extras_require["all"] = list(set(sum(extras_require.values(), [])))

setup(
    name="groupweaver",
    version=version,
    author="GroupWeaver Development Team",
    description="Relationship-aware file grouping for LLM context windows",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
        "Environment :: Console",
    ],
    python_requires=">=3.8",
    install_requires=core_requirements,
    extras_require=extras_require,
    entry_points={
        "console_scripts": [
            "groupweaver=groupweaver.cli.main:main",
            "gw=groupweaver.cli.main:main",  # Short alias
        ],
    },
    keywords=[
        "code analysis",
        "ai",
        "llm",
        "context window",
        "token budget",
        "file grouping",
        "dependency graph",
    ],
    zip_safe=False,
)
