"""
Cotizador Package

Quote pricing engine for a cleaning-service business (Argentina, Bolivia).
Resolves a quote using Zone → Line Items → Bundling → Discount → Minimum pipeline.
"""

__version__ = "2.0.0"
