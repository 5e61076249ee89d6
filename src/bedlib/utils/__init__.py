"""
Module containing resource and optional dependency management.
"""
