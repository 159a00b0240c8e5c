"""
studydesk: exam preparation dashboard state manager.

Tracks a syllabus tree, spaced-repetition revisions, habits, tasks,
flashcard decks, bookmarks and topic notes in a single local snapshot.
"""

__version__ = "1.0.0"
