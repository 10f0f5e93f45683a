"""
Dictation Engine - Voice Transcript to Structured Nursing Documentation

Turns continuous, unpunctuated clinical dictation into field-level form
updates: spoken field labels, domain extraction of vitals, medications,
assessments and wounds, and an auto-fill merge policy per session.
"""

__version__ = "1.0.0"
__author__ = "numediq"
