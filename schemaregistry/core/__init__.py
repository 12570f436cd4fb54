"""
Core building blocks: wire envelope codec and the subject cache.
"""
