"""
Quiz Guard - anti-cheating monitor for timed mock interview quizzes.
"""

__version__ = "1.0.0"
