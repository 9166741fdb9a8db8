"""
Audio shows and their episodes.
"""
