"""
ClickPredictor - Landing page click prediction and wasted-click attribution

Predicts how clicks distribute across a page's interactive elements, which
of them waste paid traffic, and what that waste costs.
"""

__version__ = "5.3.0"
__author__ = "ClickPredictor Team"
