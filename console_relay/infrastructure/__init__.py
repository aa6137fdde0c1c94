"""
Infrastructure layer: configuration, logging and destination connectors.
"""
