from __future__ import annotations


class AnalysisError(Exception):
	"""Base class for failures raised inside the analysis pipeline."""


class MalformedFactsError(AnalysisError):
	"""A fact bundle is too broken to yield even an identifying component."""


class AnalysisCancelled(AnalysisError):
	"""The caller cancelled an in-flight analysis."""


class ConfigError(AnalysisError):
	"""A classification configuration file could not be loaded."""
