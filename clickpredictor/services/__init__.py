"""
Services layer - Click prediction business logic
"""
