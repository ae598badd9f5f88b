"""
objfetch: single-object S3 retrieval for flow-based pipelines.
"""

__version__ = "0.1.0"
