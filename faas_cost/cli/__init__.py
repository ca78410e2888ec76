"""
Command-line interface for FaaS Cost.
"""
