"""Member admin configuration"""
