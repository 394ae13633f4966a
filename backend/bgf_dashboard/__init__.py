"""BGF Dashboard backend"""
