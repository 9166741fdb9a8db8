"""
Shared audio library.
"""
