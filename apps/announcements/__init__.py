"""
Announcements shown to newsroom staff and radio stations.
"""
