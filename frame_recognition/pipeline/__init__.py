"""
Main Pipeline Module.

Wires a detection source to the tracking engine.
"""

from .orchestrator import RecognitionPipeline
