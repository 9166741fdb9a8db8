"""
Users, authentication, password reset and user administration.
"""
