"""
Capture Payload Integration

Converts page capture payloads into click prediction engine input.
"""

from .data_adapter import prepare_elements, prepare_page_context

__all__ = ['prepare_elements', 'prepare_page_context']
