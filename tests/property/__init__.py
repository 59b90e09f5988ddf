"""
Modwire - Property-Based Testing Suite

Property-based testing using Hypothesis over generated module trees.
"""
