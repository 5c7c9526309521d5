"""
Geodify CLI Frontend
"""
