"""Page production workflow engine: versioned SEO/content artifacts and page status."""

__version__ = "0.1.0"
