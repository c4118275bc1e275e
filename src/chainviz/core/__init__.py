"""
Chain Visualizer Core

Contract models, expression evaluation, grouping and axis labels.
"""
