"""
Comparison engine, independent of any GUI toolkit.
"""
