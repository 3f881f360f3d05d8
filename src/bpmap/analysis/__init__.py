"""
Analysis: projections of the model and navigation through them.
"""
