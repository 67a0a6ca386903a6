"""
Lifecycle state machines for opportunities and active recommendations.
"""
