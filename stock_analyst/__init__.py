"""Stock Analyst — a crew of LLM workers that researches, writes, reviews,
archives and delivers one stock analysis report per ticker."""

__version__ = "0.1.0"
