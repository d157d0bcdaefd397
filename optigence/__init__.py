"""
Optigence Core - intent classification, emotional analysis and multi-LLM
routing for the OptiMail assistant and its sibling modules.
"""

__version__ = "0.1.0"
