"""ES Writer — answers application form questions from a user profile."""

__version__ = "0.1.0"
