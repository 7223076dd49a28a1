"""
MPT Guide - Stage-Guided Therapeutic Conversation Backend

This package drives a structured Meta-Personal Therapy (MPT) dialogue:
it classifies client turns, sequences the session through its stages,
composes stage-aware model instructions and streams the model's answer
back through a resilient dual-provider gateway.
"""

__version__ = "0.1.0"
__author__ = "MPT Guide Engineering Team"
