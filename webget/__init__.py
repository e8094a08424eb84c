"""webget - a non-interactive network retriever."""

__version__ = "1.0.0"
