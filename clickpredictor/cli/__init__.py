"""
Command-line interface for ClickPredictor
"""
