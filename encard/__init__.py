"""
Encard - a terminal flashcard quiz.
"""
__version__ = "0.1.0"
