"""Core logic: addressing, range arithmetic and tajweed annotation.

Modules:
- addressing: VerseAddress, page markers, verse -> page translation
- ranges: AchievementRange, extent(), union_pages()
- achievements: revision vs new-progress verdict, filing helpers
- student: StudentRecord and its logs
- progress: milestones, surah status, score, ranking
- orthography: word -> orthographic units
- tajweed: per-unit tajweed tags
- mistakes: per-word mistake severities
"""

__all__ = [
    "addressing",
    "ranges",
    "achievements",
    "student",
    "progress",
    "orthography",
    "tajweed",
    "mistakes",
]
