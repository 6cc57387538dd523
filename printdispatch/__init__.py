"""
Print Dispatch Server.

Downloads documents from URLs and prints them through named presets,
optionally rendering them with a Typst template first.
"""

__version__ = "1.0.0"
