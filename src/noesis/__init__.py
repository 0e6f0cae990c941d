"""
Noesis — configuration-driven kernel assembly.

A kernel combines a completion backend, an embedding backend and a
long-term vector memory. Which concrete backends get built is decided
entirely by configuration (see ``noesis.core.config``).
"""

__version__ = "0.1.0"
