"""YucaBot: document ingestion and grounded question answering."""

__version__ = "0.1.0"
