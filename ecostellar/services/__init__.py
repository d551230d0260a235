"""Services.

Blockchain access layer.
"""
