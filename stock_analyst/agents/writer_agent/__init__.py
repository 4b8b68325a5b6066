"""Writer Worker — synthesizes analyst output into a structured report."""
from .writer_agent import WriterWorker

__all__ = ["WriterWorker"]
