"""
Radio stations: the tenants that consume published newsroom content.
"""
