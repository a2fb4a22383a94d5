"""
eifscope Parsers
=================

Pure decoders (and matching encoders) for the fixed-layout structures of
the image format: the 548-byte file header and the 12-byte section
sub-header.  Layout constants live in :mod:`eifscope.parsers.constants`.
"""
