"""
Resource and optional dependency management.
"""
from functools import cached_property, lru_cache
from importlib import import_module
from pathlib import Path
from typing import Callable

from numpy.random import default_rng


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class BedlibWarning(Warning): pass


# Classes --------------------------------------------------------------------------------------------------------------
class Resources:
    """
    Manages global resources like the random number generator and optional dependencies.

    Attributes:
        package (str): The package name.
        optional_packages (set[str]): The optional packages found at import time.
    """
    def __init__(self, *optional_packages: str):
        self.package = Path(__file__).parent.parent.name
        self.optional_packages = set(filter(self.has_module, optional_packages))

    @cached_property
    def rng(self):
        """Returns a default numpy random number generator."""
        return default_rng()

    @staticmethod
    @lru_cache(maxsize=None)
    def has_module(module_name: str) -> bool:
        """Checks if a python package is installed."""
        try:
            import_module(module_name)
            return True
        except ImportError: return False


# Decorators -----------------------------------------------------------------------------------------------------------
def jit(signature_or_function=None, **options) -> Callable:
    """
    Compiles a kernel with numba when it is installed, and leaves it as plain Python otherwise.

    Works both bare (``@jit``) and with options (``@jit(nopython=True, cache=True)``); the
    options are ignored without numba.
    """
    if 'numba' not in RESOURCES.optional_packages:
        if callable(signature_or_function): return signature_or_function
        def passthrough(func: Callable) -> Callable: return func
        return passthrough
    from numba import jit as real_jit
    if callable(signature_or_function): return real_jit(signature_or_function)
    return real_jit(signature_or_function, **options)


# Constants ------------------------------------------------------------------------------------------------------------
RESOURCES = Resources('numba')
