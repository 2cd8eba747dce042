"""Terminal front-end for the member admin client"""
