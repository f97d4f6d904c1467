DEFAULT_IGNORE_PROFILES = {
    "Python (General)": [
        "__pycache__", "venv", ".venv", "*.pyc", "*.egg-info",
        "build", "dist", ".env", ".pytest_cache", ".mypy_cache"
    ],
    "Node.js (React/Next)": [
        "node_modules", ".next", "build", "dist", "coverage",
        "package-lock.json", "yarn.lock", "pnpm-lock.yaml"
    ],
    "General Purpose": [
        ".git", ".vscode", ".idea", "*.log", "*.tmp", "*.swp", ".DS_Store"
    ],
    "Media & Docs": [
        "*.png", "*.jpg", "*.jpeg", "*.gif", "*.bmp", "*.ico",
        "*.mp3", "*.mp4", "*.avi", "*.mov", "*.webm",
        "*.pdf", "*.zip", "*.gz", "*.tar", "*.rar",
        "*.doc", "*.docx", "*.xls", "*.xlsx", "*.ppt", "*.pptx"
    ]
}


def default_ignore_patterns():
    """Union of all profiles, first occurrence order."""
    patterns = []
    for profile in DEFAULT_IGNORE_PROFILES.values():
        patterns.extend(profile)
    return list(dict.fromkeys(patterns))
