"""
genome annotation indexing, genic region classification and variant consequence calling
"""
__version__ = '1.0.0'
