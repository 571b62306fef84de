"""
gene model loading, genic region classification and coding variant effect calling
"""
