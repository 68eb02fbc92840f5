"""Agents that post-process engine output."""
