"""
Configuration loading for FaaS Cost.
"""
