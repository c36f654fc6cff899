"""MailMind - recruitment email triage (classification + CV detection)."""

__version__ = "0.1.0"
