"""Core member admin functionality"""
