"""
Setup script for studydesk.

studydesk is a personal exam preparation dashboard kept as one local JSON
snapshot:

1. Syllabus Tracker - Weighted completion over a four-paper topic tree
2. Revision Queue - Fixed 1/3/7/30 day spaced revisions per topic
3. Daily Tools - Habits, tasks, flashcards, bookmarks, notes and focus log

The 'studydesk' command is the terminal front-end.
"""

from setuptools import find_packages, setup

setup(
    name="studydesk",
    version="1.0.0",
    description="Exam preparation dashboard: syllabus, revisions, habits and flashcards",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["studydesk", "studydesk.*"]),
    py_modules=["config"],
    package_data={"studydesk": ["content/*.json"]},
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # HTTP
        "httpx>=0.25.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "studydesk=studydesk.cli.app:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
    ],
    keywords="study dashboard spaced-repetition habits flashcards cli",
)
