"""
Stories: authoring, editorial workflow, translations and comments.
"""
