[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "musictui"
version = "0.1.0"
description = "Terminal music player and downloader with a local library, online search and synced lyrics"
requires-python = ">=3.11"
keywords = ["music", "terminal", "tui", "curses", "lyrics", "lrc", "ffplay", "ffprobe", "player"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console :: Curses",
    "Intended Audience :: End Users/Desktop",
    "Natural Language :: Chinese (Simplified)",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Players",
]
dependencies = [
    "tomli-w>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
musictui = "musictui.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["musictui"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
