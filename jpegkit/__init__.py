"""JPEG decoder components: inverse DCTs, pooled memory, virtual arrays and error messages."""

__version__ = "0.1.0"

__all__ = [
    "errors",
    "idct_islow",
    "idct_fast",
    "idct_float",
    "idct_reduced",
    "memsys",
    "memory",
    "virtual",
]