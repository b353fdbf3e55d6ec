"""Support Q&A - retrieval-augmented answers over documents and support tickets."""

__version__ = "1.0.0"
