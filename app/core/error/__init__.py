"""Error types and handling"""
