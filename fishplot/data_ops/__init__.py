"""
Data operations for fish plots: the clone forest, outline geometry and
draw-order traversal. Nothing here touches a drawing surface.
"""
