"""
File Diff: live two-way comparison and merging of text documents.
"""

__version__ = "1.0.0"
