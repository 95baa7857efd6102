"""Shared infrastructure: logging, configuration, credentials, database"""
