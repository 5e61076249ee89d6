"""
Containers for BED content: single regions, tracks grouping them, and the chromosome-indexed file model.
"""
