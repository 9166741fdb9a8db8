"""
News bulletins: ordered bundles of published stories read on air.
"""
