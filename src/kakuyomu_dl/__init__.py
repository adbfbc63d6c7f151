"""kakuyomu-dl: download Kakuyomu web novels as Aozora Bunko formatted text."""

__version__ = "0.1.0"
