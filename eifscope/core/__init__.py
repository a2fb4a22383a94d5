"""
eifscope Core Module
=====================

Data models, the fatal error hierarchy and the image reader that
orchestrates header and section decoding.
"""
