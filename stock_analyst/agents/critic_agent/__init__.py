"""Critic Worker — evaluates a draft and returns a PASS/FAIL verdict."""
from .critic_agent import CriticWorker, parse_verdict

__all__ = ["CriticWorker", "parse_verdict"]
