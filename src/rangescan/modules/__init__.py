"""Scanning engine and its collaborators."""
