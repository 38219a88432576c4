"""Accessibility audits for live web pages: Playwright + axe-core, CI-friendly verdicts."""

__version__ = "1.0.0"
