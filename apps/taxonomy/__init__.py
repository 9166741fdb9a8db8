"""
Categories, tags and classifications used to file stories and shows.
"""
