"""
Invoice Service - order-to-invoice pipeline
"""
__version__ = "1.0.0"
