"""
Configuration settings for the stats facade.
"""
import os

# Log every stat call before forwarding it to the backend
VERBOSE = os.getenv('STATS_VERBOSE', 'false').lower() in ('1', 'true', 'yes', 'on')
