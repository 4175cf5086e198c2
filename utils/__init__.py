"""
Utilities for deepwork-tracker
"""
