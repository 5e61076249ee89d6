"""
Symbol interning and optional-column decoding shared by the containers.
"""
