def compress_image(url: str) -> str:
    """Stand-in for the real compressor: deterministic, so reprocessing is idempotent."""
    return f"compressed_{url}"
