"""
Services package.
"""
