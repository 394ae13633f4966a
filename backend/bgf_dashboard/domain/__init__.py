"""Domain layer - Enums, models, errors and static configuration"""
