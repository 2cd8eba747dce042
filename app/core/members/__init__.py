"""Member list, form and credit operations"""
