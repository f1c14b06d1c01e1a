"""
Command line, evaluation and plotting utilities.
"""
