"""
Backend Scripts Module

Utility scripts for database setup and maintenance.

Available scripts:
    - seed_data.py: Creates sample accounts and requests for local testing
    - migrate_staff_access_codes.py: Loads staff access codes into MongoDB
    - validate_stage_graphs.py: Prints the stage graphs and checks them

Usage:
    python -m scripts.seed_data
"""
