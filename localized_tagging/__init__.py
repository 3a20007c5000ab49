"""
Localized Tagging is a reusable Django app for labeling any model with typed, multi-locale tags.
"""
__version__ = "0.1.0"
