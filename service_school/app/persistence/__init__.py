"""
Persistence package for the School Service.
"""
