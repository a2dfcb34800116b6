"""
Test suite for the docxbuild package.
"""
