"""
redisstash - Cache Backends

Exports available cache backend implementations.
"""

from .redis import RedisCacheBackend

__all__ = [
    "RedisCacheBackend",
]
