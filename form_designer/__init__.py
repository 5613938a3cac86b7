"""Form Designer — document mutation engine, rule engine, and history for a visual form builder."""

__version__ = "0.1.0"
