"""Signal analysis helpers (windows, transform, measurement, spectrum).

Modules in this package operate on NumPy arrays of captured samples and stay
free of threading and I/O so they can be exercised directly from tests or
reused outside the :class:`~dsoanalysis.core.analyzer.DataAnalyzer`.
"""
