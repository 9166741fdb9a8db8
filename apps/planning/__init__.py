"""
Newsroom planning: work tasks and the editorial diary.
"""
