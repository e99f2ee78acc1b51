"""
Order lifecycle & availability engine.
"""

__version__ = "0.1.0"
