"""
Utility modules for the P2P rate alert system.
"""
