"""
Core modules for Session Statusline.

This package contains usage tracking, window aggregation, and
session snapshot parsing.
"""
