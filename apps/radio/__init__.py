"""
Read-only content API for radio-station accounts.
"""
