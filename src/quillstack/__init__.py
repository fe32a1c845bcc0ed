"""QuillStack: note-type classification and sectioning for handwritten OCR text."""

__version__ = "0.1.0"
